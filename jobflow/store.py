"""In-memory store for jobs, the résumé and settings, persisted on every change."""
from __future__ import annotations

import copy
from typing import Any, Callable

from jobflow.errors import ValidationError
from jobflow.log import get_logger
from jobflow.models import (
    Job,
    Project,
    Resume,
    Section,
    Settings,
    merge_job,
    merge_project,
    merge_resume,
    merge_section,
    merge_settings,
    new_job,
)
from jobflow.storage import JOBS_KEY, RESUME_KEY, SETTINGS_KEY, Storage, StorageError

log = get_logger(__name__)

Listener = Callable[[str], None]


class JobStore:
    """Authoritative state for one user on one device.

    Reads return copies. Every mutation saves the whole affected collection
    and then notifies subscribers with the collection key.
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._listeners: list[Listener] = []
        self._jobs: list[Job] = self._load_jobs()
        self._resume: Resume = self._load_one(RESUME_KEY, Resume.from_dict, Resume)
        self._settings: Settings = self._load_one(SETTINGS_KEY, Settings.from_dict, Settings)
        log.info("Store loaded: %d job(s)", len(self._jobs))

    # ── Loading ──────────────────────────────────────────────────────────

    def _read(self, key: str) -> Any | None:
        try:
            return self._storage.load(key)
        except StorageError as exc:
            log.warning("Could not read %s, starting from defaults: %s", key, exc)
            return None

    def _load_jobs(self) -> list[Job]:
        raw = self._read(JOBS_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            log.warning("Stored jobs are not a list, starting empty")
            return []
        jobs: list[Job] = []
        seen: set[str] = set()
        for item in raw:
            try:
                job = Job.from_dict(item)
            except (ValidationError, TypeError, AttributeError) as exc:
                log.warning("Skipping unreadable job record: %s", exc)
                continue
            if job.id in seen:
                log.warning("Skipping duplicate job id %s", job.id)
                continue
            seen.add(job.id)
            jobs.append(job)
        return jobs

    def _load_one(self, key: str, parse: Callable[[Any], Any], default: Callable[[], Any]) -> Any:
        raw = self._read(key)
        if raw is None:
            return default()
        try:
            return parse(raw)
        except (ValidationError, TypeError, AttributeError) as exc:
            log.warning("Stored %s is malformed, using defaults: %s", key, exc)
            return default()

    # ── Change propagation ───────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener(collection_key)* after every mutation; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, key: str) -> None:
        if key == JOBS_KEY:
            snapshot: Any = [j.to_dict() for j in self._jobs]
        elif key == RESUME_KEY:
            snapshot = self._resume.to_dict()
        else:
            snapshot = self._settings.to_dict()
        self._storage.save(key, snapshot)
        for listener in list(self._listeners):
            try:
                listener(key)
            except Exception:
                log.exception("Store listener failed for %s", key)

    # ── Jobs ─────────────────────────────────────────────────────────────

    @property
    def jobs(self) -> list[Job]:
        """Newest first."""
        return copy.deepcopy(self._jobs)

    def get_job(self, job_id: str) -> Job | None:
        for job in self._jobs:
            if job.id == job_id:
                return copy.deepcopy(job)
        return None

    def add_job(self, fields: dict[str, Any] | None = None, **kwargs: Any) -> Job:
        job = new_job({**(fields or {}), **kwargs})
        self._jobs.insert(0, job)
        log.debug("Added job %s: %s @ %s", job.id, job.role, job.company)
        self._commit(JOBS_KEY)
        return copy.deepcopy(job)

    def update_job(self, job_id: str, **updates: Any) -> None:
        for i, job in enumerate(self._jobs):
            if job.id == job_id:
                self._jobs[i] = merge_job(job, updates)
                log.debug("Updated job %s: %s", job_id, ", ".join(sorted(updates)))
                self._commit(JOBS_KEY)
                return
        log.debug("update_job: no job %s", job_id)

    def delete_job(self, job_id: str) -> None:
        remaining = [j for j in self._jobs if j.id != job_id]
        if len(remaining) == len(self._jobs):
            log.debug("delete_job: no job %s", job_id)
            return
        self._jobs = remaining
        log.debug("Deleted job %s", job_id)
        self._commit(JOBS_KEY)

    def filter_jobs(self, origin: str | None = None, status: str | None = None, query: str = "") -> list[Job]:
        """Origin tab, status filter and free-text search over company/role/location."""
        q = query.strip().lower()
        out: list[Job] = []
        for job in self._jobs:
            if origin and job.origin != origin:
                continue
            if status and job.status != status:
                continue
            if q and not (q in job.company.lower() or q in job.role.lower() or q in job.location.lower()):
                continue
            out.append(copy.deepcopy(job))
        return out

    # ── Résumé ───────────────────────────────────────────────────────────

    @property
    def resume(self) -> Resume:
        return copy.deepcopy(self._resume)

    def update_resume(self, **updates: Any) -> None:
        self._resume = merge_resume(self._resume, updates)
        self._commit(RESUME_KEY)

    def add_experience(self, title: str = "", content: str = "", date: str = "") -> Section:
        return self._add_section("experience", Section(title=title, content=content, date=date))

    def update_experience(self, section_id: str, **updates: Any) -> None:
        self._update_item("experience", section_id, merge_section, updates)

    def remove_experience(self, section_id: str) -> None:
        self._remove_item("experience", section_id)

    def add_education(self, title: str = "", content: str = "", date: str = "") -> Section:
        return self._add_section("education", Section(title=title, content=content, date=date))

    def update_education(self, section_id: str, **updates: Any) -> None:
        self._update_item("education", section_id, merge_section, updates)

    def remove_education(self, section_id: str) -> None:
        self._remove_item("education", section_id)

    def add_project(self, name: str = "", description: str = "", tech: list[str] | None = None) -> Project:
        project = merge_project(Project(name=name, description=description), {"tech": tech or []})
        self._resume.projects.append(project)
        self._commit(RESUME_KEY)
        return copy.deepcopy(project)

    def update_project(self, project_id: str, **updates: Any) -> None:
        self._update_item("projects", project_id, merge_project, updates)

    def remove_project(self, project_id: str) -> None:
        self._remove_item("projects", project_id)

    def _add_section(self, list_name: str, section: Section) -> Section:
        getattr(self._resume, list_name).append(section)
        self._commit(RESUME_KEY)
        return copy.deepcopy(section)

    def _update_item(self, list_name: str, item_id: str, merge: Callable[[Any, dict], Any], updates: dict) -> None:
        items = getattr(self._resume, list_name)
        for i, item in enumerate(items):
            if item.id == item_id:
                items[i] = merge(item, updates)
                self._commit(RESUME_KEY)
                return
        log.debug("%s: no item %s", list_name, item_id)

    def _remove_item(self, list_name: str, item_id: str) -> None:
        items = getattr(self._resume, list_name)
        remaining = [it for it in items if it.id != item_id]
        if len(remaining) == len(items):
            return
        setattr(self._resume, list_name, remaining)
        self._commit(RESUME_KEY)

    # ── Settings ─────────────────────────────────────────────────────────

    @property
    def settings(self) -> Settings:
        return copy.deepcopy(self._settings)

    def update_settings(self, **updates: Any) -> None:
        self._settings = merge_settings(self._settings, updates)
        log.debug("Updated settings: %s", ", ".join(sorted(updates)))
        self._commit(SETTINGS_KEY)
