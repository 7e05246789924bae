#!/usr/bin/env python3
"""
Context compiler for the portfolio chatbot.

Turns the portfolio records into the plain-text knowledge context the LLM is
grounded on. The output depends only on the records passed in: sections
always appear in the same order, records keep their source order, and a
missing field is left out of its record instead of being rendered blank.
"""

import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from ..schemas.records import (
    CertificateRecord,
    EducationRecord,
    ExperienceRecord,
    KnowledgeRecords,
    ProfileFactRecord,
    ProjectRecord,
    SkillRecord,
)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

PRESENT = "Present"
EMPTY_SECTION = "- None listed"


def format_number(value: float) -> str:
    """Render 3.0 as '3' and 2.5 as '2.5'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:g}"


def format_years(value: float) -> str:
    unit = "year" if float(value) == 1 else "years"
    return f"{format_number(value)} {unit}"


def format_month(value: datetime.date) -> str:
    return f"{MONTHS[value.month - 1]} {value.year}"


def format_range(start: datetime.date, end: Optional[datetime.date]) -> str:
    return f"{format_month(start)} - {format_month(end) if end else PRESENT}"


def _block(headline: str, *lines: Optional[str]) -> str:
    """Bullet headline followed by the indented lines that are present."""
    body = [f"  {line}" for line in lines if line]
    return "\n".join([f"• {headline}", *body])


def _joined(label: str, items: Sequence[str], sep: str = ", ") -> Optional[str]:
    return f"{label}: {sep.join(items)}" if items else None


class ContextCompiler:
    """Compiles KnowledgeRecords into a single knowledge context string."""

    def __init__(self, owner_name: str = "the portfolio owner"):
        self.owner_name = owner_name

    def _sections(self) -> List[Tuple[str, str, Callable]]:
        # (label, KnowledgeRecords attribute, formatter) in the fixed output order
        return [
            ("Profile", "profile", self.format_profile_fact),
            ("Skills", "skills", self.format_skill),
            ("Work Experience", "experience", self.format_experience),
            ("Education", "education", self.format_education),
            ("Projects", "projects", self.format_project),
            ("Certifications", "certificates", self.format_certificate),
        ]

    def compile(self, records: KnowledgeRecords) -> str:
        parts = [f"Portfolio information about {self.owner_name}:"]
        for label, attr, formatter in self._sections():
            rows = getattr(records, attr)
            entries = [formatter(row) for row in rows] or [EMPTY_SECTION]
            parts.append(f"{label}:\n" + "\n".join(entries))
        return "\n\n".join(parts)

    @staticmethod
    def format_profile_fact(fact: ProfileFactRecord) -> str:
        return f"- {fact.label}: {fact.value}"

    @staticmethod
    def format_skill(skill: SkillRecord) -> str:
        details = []
        if skill.proficiency is not None:
            details.append(f"{format_number(skill.proficiency)}%")
        if skill.years_of_experience is not None:
            details.append(format_years(skill.years_of_experience))

        line = f"- {skill.name}"
        if details:
            line += f" ({', '.join(details)})"
        if skill.category:
            line += f" [{skill.category}]"
        return line

    @staticmethod
    def format_experience(exp: ExperienceRecord) -> str:
        return _block(
            f"{exp.position} at {exp.company}",
            format_range(exp.start_date, exp.end_date),
            exp.location,
            exp.description,
            _joined("Tech stack", exp.technologies),
            _joined("Achievements", exp.achievements, "; "),
        )

    @staticmethod
    def format_education(edu: EducationRecord) -> str:
        headline = f"{edu.degree} in {edu.field}" if edu.field else edu.degree
        return _block(
            headline,
            edu.institution,
            format_range(edu.start_date, edu.end_date),
            edu.location,
            edu.description,
            _joined("Achievements", edu.achievements, "; "),
        )

    @staticmethod
    def format_project(project: ProjectRecord) -> str:
        return _block(
            project.title,
            project.description,
            _joined("Tech stack", project.technologies),
            f"Demo: {project.live_url}" if project.live_url else None,
            f"Code: {project.github_url}" if project.github_url else None,
        )

    @staticmethod
    def format_certificate(cert: CertificateRecord) -> str:
        return _block(
            cert.title,
            f"From: {cert.issuer}",
            f"Date: {format_month(cert.date)}" if cert.date else None,
            cert.description,
            _joined("Skills", cert.skills),
            f"Verify: {cert.verification_url}" if cert.verification_url else None,
        )
