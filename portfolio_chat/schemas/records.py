"""Strict, read-only portfolio record types consumed by the context compiler.

Rows coming out of the database are loosely typed (nullable columns, legacy
field names, JSON lists that may be null). They are normalized into these
models once, at the record reader boundary, so the compiler only ever sees
complete, validated records.
"""
import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

# required text: surrounding whitespace stripped, blank rejected
RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def _clean_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list, got {type(value).__name__}")
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _clean_text(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)


class ProfileFactRecord(_Record):
    label: RequiredText
    value: RequiredText


class SkillRecord(_Record):
    name: RequiredText
    category: Optional[str] = None
    proficiency: Optional[float] = Field(default=None, ge=0, le=100)
    years_of_experience: Optional[float] = Field(default=None, ge=0)

    @field_validator("category", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _clean_text(value)


class ExperienceRecord(_Record):
    position: RequiredText
    company: RequiredText
    start_date: datetime.date
    end_date: Optional[datetime.date] = None
    location: Optional[str] = None
    description: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    achievements: List[str] = Field(default_factory=list)

    @field_validator("location", "description", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _clean_text(value)

    @field_validator("technologies", "achievements", mode="before")
    @classmethod
    def clean_lists(cls, value):
        return _clean_list(value)


class EducationRecord(_Record):
    degree: RequiredText
    institution: RequiredText
    start_date: datetime.date
    field: Optional[str] = None
    end_date: Optional[datetime.date] = None
    location: Optional[str] = None
    description: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)

    @field_validator("field", "location", "description", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _clean_text(value)

    @field_validator("achievements", mode="before")
    @classmethod
    def clean_lists(cls, value):
        return _clean_list(value)


class ProjectRecord(_Record):
    title: RequiredText
    description: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    live_url: Optional[str] = None
    github_url: Optional[str] = None

    @field_validator("description", "live_url", "github_url", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _clean_text(value)

    @field_validator("technologies", mode="before")
    @classmethod
    def clean_lists(cls, value):
        return _clean_list(value)


class CertificateRecord(_Record):
    title: RequiredText
    issuer: RequiredText
    date: Optional[datetime.date] = None
    description: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    verification_url: Optional[str] = None

    @field_validator("description", "verification_url", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _clean_text(value)

    @field_validator("skills", mode="before")
    @classmethod
    def clean_lists(cls, value):
        return _clean_list(value)


class KnowledgeRecords(_Record):
    """All portfolio collections, each in stable source order."""
    profile: List[ProfileFactRecord] = Field(default_factory=list)
    skills: List[SkillRecord] = Field(default_factory=list)
    experience: List[ExperienceRecord] = Field(default_factory=list)
    education: List[EducationRecord] = Field(default_factory=list)
    projects: List[ProjectRecord] = Field(default_factory=list)
    certificates: List[CertificateRecord] = Field(default_factory=list)
