#!/usr/bin/env python3
"""
Record reader for the portfolio chatbot.

Fetches every portfolio collection concurrently and normalizes the rows into
the strict record types the context compiler works with.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Protocol

from .config import Config
from .errors import DataSourceError
from ..data.models import ProfileFact, Skill, Experience, Education, Project, Certificate
from ..schemas.records import (
    CertificateRecord,
    EducationRecord,
    ExperienceRecord,
    KnowledgeRecords,
    ProfileFactRecord,
    ProjectRecord,
    SkillRecord,
)
from ..utils.logger import get_logger

logger = get_logger()


class RecordSource(Protocol):
    """Read-only access to each portfolio collection, in stable order."""

    def read_profile(self) -> List[ProfileFactRecord]: ...
    def read_skills(self) -> List[SkillRecord]: ...
    def read_experience(self) -> List[ExperienceRecord]: ...
    def read_education(self) -> List[EducationRecord]: ...
    def read_projects(self) -> List[ProjectRecord]: ...
    def read_certificates(self) -> List[CertificateRecord]: ...


class SqlRecordSource:
    """RecordSource backed by the SQLAlchemy portfolio database.

    Each read opens its own session so the reads can run on separate threads.
    Hidden rows are skipped and rows come back in primary-key order.
    """

    def __init__(self, session_factory=None):
        if session_factory is None:
            from ..data.database import SessionLocal
            session_factory = SessionLocal
        self.session_factory = session_factory

    def _visible(self, model) -> list:
        db = self.session_factory()
        try:
            return (
                db.query(model)
                .filter(model.visible.is_(True))
                .order_by(model.id)
                .all()
            )
        finally:
            db.close()

    def read_profile(self) -> List[ProfileFactRecord]:
        records = []
        for row in self._visible(ProfileFact):
            # a fact without a value says nothing; skip it rather than fail the read
            if not (row.value or "").strip():
                logger.warning(f"[RECORDS] Skipping profile fact #{row.id} '{row.label}' with blank value")
                continue
            records.append(ProfileFactRecord.model_validate(row))
        return records

    def read_skills(self) -> List[SkillRecord]:
        return [SkillRecord.model_validate(row) for row in self._visible(Skill)]

    def read_experience(self) -> List[ExperienceRecord]:
        records = []
        for row in self._visible(Experience):
            records.append(ExperienceRecord(
                position=row.position or row.title,
                company=row.company,
                start_date=row.start_date,
                end_date=row.end_date,
                location=row.location,
                description=row.description,
                technologies=row.technologies,
                achievements=row.achievements,
            ))
        return records

    def read_education(self) -> List[EducationRecord]:
        return [EducationRecord.model_validate(row) for row in self._visible(Education)]

    def read_projects(self) -> List[ProjectRecord]:
        return [ProjectRecord.model_validate(row) for row in self._visible(Project)]

    def read_certificates(self) -> List[CertificateRecord]:
        return [CertificateRecord.model_validate(row) for row in self._visible(Certificate)]


class RecordReader:
    """Reads all portfolio collections at once; all or nothing."""

    def __init__(self, source: RecordSource, max_workers: int = None):
        self.source = source
        self.max_workers = max_workers or Config.RECORD_READER_WORKERS

    def _readers(self) -> Dict[str, Callable[[], list]]:
        return {
            "profile": self.source.read_profile,
            "skills": self.source.read_skills,
            "experience": self.source.read_experience,
            "education": self.source.read_education,
            "projects": self.source.read_projects,
            "certificates": self.source.read_certificates,
        }

    def fetch_all_records(self) -> KnowledgeRecords:
        """
        Fetch every collection concurrently and wait for all of them.

        Returns:
            KnowledgeRecords with one list per collection

        Raises:
            DataSourceError: if any single read fails
        """
        readers = self._readers()
        logger.info(f"[RECORDS] Fetching {len(readers)} collections")

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="record-reader") as pool:
            futures = {name: pool.submit(read) for name, read in readers.items()}

            results = {}
            failures = []
            for name, future in futures.items():
                try:
                    results[name] = future.result()
                except Exception as e:
                    logger.error(f"[RECORDS] Reading '{name}' failed: {e}")
                    failures.append((name, e))

        if failures:
            name, first = failures[0]
            failed = ", ".join(n for n, _ in failures)
            raise DataSourceError(f"Failed to read portfolio collections: {failed}") from first

        counts = ", ".join(f"{name}={len(rows)}" for name, rows in results.items())
        logger.info(f"[RECORDS] Fetched {counts}")
        return KnowledgeRecords(**results)
