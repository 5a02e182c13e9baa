"""Data models for tracked jobs, the résumé and app settings."""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import date
from typing import Any

from jobflow.errors import ValidationError

JOB_STATUSES: tuple[str, ...] = ("Applied", "Interview", "Offer", "Rejected", "Accepted")
JOB_ORIGINS: tuple[str, ...] = ("application", "offer")


def new_id() -> str:
    return str(uuid.uuid4())


def parse_date(value: Any) -> date:
    """Accept a date or an ISO ``YYYY-MM-DD`` string (time part ignored)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValidationError(f"Invalid application date: {value!r}")


@dataclass
class Job:
    company: str
    role: str
    status: str = "Applied"
    origin: str = "application"
    salary: str = ""
    location: str = ""
    date_applied: date = field(default_factory=date.today)
    description: str = ""
    cover_letter: str = ""
    interview_guide: str = ""
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date_applied"] = self.date_applied.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Job:
        if not isinstance(data.get("id"), str) or not data["id"]:
            raise ValidationError("Stored job has no usable id")
        job = cls(**_known(cls, data))
        job.date_applied = parse_date(job.date_applied)
        _check_job(job)
        return job


@dataclass
class Section:
    title: str = ""
    content: str = ""
    date: str = ""
    id: str = field(default_factory=new_id)


@dataclass
class Project:
    name: str = ""
    description: str = ""
    tech: list[str] = field(default_factory=list)
    id: str = field(default_factory=new_id)


@dataclass
class Resume:
    full_name: str = ""
    summary: str = ""
    skills: str = ""
    avatar: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    experience: list[Section] = field(default_factory=list)
    education: list[Section] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Resume:
        if not isinstance(data, dict):
            raise ValidationError("Stored résumé is not a mapping")
        values = _known(cls, data)
        values["experience"] = [_section(s) for s in values.get("experience") or []]
        values["education"] = [_section(s) for s in values.get("education") or []]
        values["projects"] = [_project(p) for p in values.get("projects") or []]
        return cls(**values)


@dataclass
class Settings:
    resume: Resume = field(default_factory=Resume)
    api_key: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"resume": self.resume.to_dict(), "api_key": self.api_key}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        if not isinstance(data, dict):
            raise ValidationError("Stored settings are not a mapping")
        return cls(
            resume=Resume.from_dict(data.get("resume") or {}),
            api_key=str(data.get("api_key") or ""),
        )


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "user" | "model"
    content: str


# ── Merge rules ──────────────────────────────────────────────────────────

_JOB_MUTABLE = {f.name for f in fields(Job)} - {"id"}
_RESUME_SCALARS = {"full_name", "summary", "skills", "avatar", "email", "phone", "location"}
_SECTION_MUTABLE = {"title", "content", "date"}
_PROJECT_MUTABLE = {"name", "description", "tech"}


def merge_job(job: Job, updates: dict[str, Any]) -> Job:
    """Return a copy of *job* with only the supplied fields changed."""
    _reject_unknown("job", updates, _JOB_MUTABLE)
    changes = dict(updates)
    if "date_applied" in changes:
        changes["date_applied"] = parse_date(changes["date_applied"])
    merged = replace(job, **changes)
    _check_job(merged)
    return merged


def merge_section(section: Section, updates: dict[str, Any]) -> Section:
    _reject_unknown("section", updates, _SECTION_MUTABLE)
    return replace(section, **{k: str(v) for k, v in updates.items()})


def merge_project(project: Project, updates: dict[str, Any]) -> Project:
    _reject_unknown("project", updates, _PROJECT_MUTABLE)
    changes = dict(updates)
    if "tech" in changes:
        changes["tech"] = _tech_list(changes["tech"])
    return replace(project, **changes)


def merge_resume(resume: Resume, updates: dict[str, Any]) -> Resume:
    """Top-level résumé merge: scalars overwrite, supplied lists replace whole.

    List items without an id (e.g. from résumé analysis) get a fresh one.
    """
    _reject_unknown("résumé", updates, _RESUME_SCALARS | {"experience", "education", "projects"})
    changes: dict[str, Any] = {}
    for key, value in updates.items():
        if key in _RESUME_SCALARS:
            changes[key] = "" if value is None else str(value)
        elif key == "projects":
            changes[key] = [_project(p) for p in value or []]
        else:
            changes[key] = [_section(s) for s in value or []]
    return replace(resume, **changes)


def merge_settings(settings: Settings, updates: dict[str, Any]) -> Settings:
    """Top-level settings merge; the nested résumé is merged one level deeper."""
    _reject_unknown("settings", updates, {"resume", "api_key"})
    merged = settings
    if "api_key" in updates:
        merged = replace(merged, api_key=str(updates["api_key"] or ""))
    if updates.get("resume"):
        resume_updates = updates["resume"]
        if isinstance(resume_updates, Resume):
            resume_updates = resume_updates.to_dict()
        merged = replace(merged, resume=merge_resume(merged.resume, resume_updates))
    return merged


# ── Helpers ──────────────────────────────────────────────────────────────


def new_job(values: dict[str, Any]) -> Job:
    """Build and validate a job from caller fields; any id given is ignored."""
    values = {k: v for k, v in values.items() if k != "id"}
    _reject_unknown("job", values, _JOB_MUTABLE)
    if "date_applied" in values:
        values["date_applied"] = parse_date(values["date_applied"])
    job = Job(**{"company": "", "role": "", **values})
    _check_job(job)
    return job


def _check_job(job: Job) -> None:
    if not isinstance(job.company, str) or not job.company.strip():
        raise ValidationError("Company is required")
    if not isinstance(job.role, str) or not job.role.strip():
        raise ValidationError("Role is required")
    if job.status not in JOB_STATUSES:
        raise ValidationError(f"Unknown status {job.status!r}; expected one of {', '.join(JOB_STATUSES)}")
    if job.origin not in JOB_ORIGINS:
        raise ValidationError(f"Unknown origin {job.origin!r}; expected one of {', '.join(JOB_ORIGINS)}")
    for name in ("salary", "location", "description", "cover_letter", "interview_guide"):
        value = getattr(job, name)
        if value is None:
            setattr(job, name, "")
        elif not isinstance(value, str):
            raise ValidationError(f"{name} must be text, got {type(value).__name__}")


def _reject_unknown(kind: str, updates: dict[str, Any], allowed: set[str]) -> None:
    unknown = sorted(set(updates) - allowed)
    if unknown:
        raise ValidationError(f"Unknown {kind} field(s): {', '.join(unknown)}")


def _known(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names and v is not None}


def _section(data: Any) -> Section:
    if isinstance(data, Section):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Résumé section must be a mapping")
    values = {k: str(v) for k, v in _known(Section, data).items()}
    if not values.get("id"):
        values.pop("id", None)
    return Section(**values)


def _project(data: Any) -> Project:
    if isinstance(data, Project):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Project must be a mapping")
    values = _known(Project, data)
    values["tech"] = _tech_list(values.get("tech", []))
    if not values.get("id"):
        values.pop("id", None)
    return Project(**values)


def _tech_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    return [str(t) for t in value or []]
