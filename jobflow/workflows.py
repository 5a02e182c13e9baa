"""Generate per-job documents and import résumés, writing results back to the store."""
from __future__ import annotations

from typing import Any

from jobflow.config import resolve_api_key
from jobflow.errors import MissingCredentialError, ValidationError
from jobflow.genai import GenAIClient
from jobflow.log import get_logger
from jobflow.store import JobStore

log = get_logger(__name__)


def _inputs(store: JobStore, job_id: str) -> tuple[str, Any, str]:
    """Credential, job and skills text; checked before any request goes out."""
    settings = store.settings
    api_key = resolve_api_key(settings)
    if not api_key:
        raise MissingCredentialError("Please add your Gemini API key in Settings first")
    skills = settings.resume.skills.strip()
    if not skills:
        raise ValidationError("Please add your skills in Settings first")
    job = store.get_job(job_id)
    if job is None:
        raise ValidationError(f"No job with id {job_id}")
    return api_key, job, skills


def generate_cover_letter_for_job(store: JobStore, client: GenAIClient, job_id: str) -> str:
    api_key, job, skills = _inputs(store, job_id)
    letter = client.generate_cover_letter(api_key, job.role, job.company, skills)
    # the job may have been deleted while we were waiting
    store.update_job(job_id, cover_letter=letter)
    return letter


def generate_interview_guide_for_job(store: JobStore, client: GenAIClient, job_id: str) -> str:
    api_key, job, skills = _inputs(store, job_id)
    guide = client.generate_interview_guide(api_key, job.role, job.company, skills)
    store.update_job(job_id, interview_guide=guide)
    return guide


def import_resume_document(store: JobStore, client: GenAIClient, data: bytes, filename: str = "") -> dict[str, Any]:
    """Analyse an uploaded résumé and merge the result into the store's résumé.

    Raises MissingCredentialError, GenerationError or ResumeParseError; the
    stored résumé is only touched when analysis succeeds.
    """
    api_key = resolve_api_key(store.settings)
    if not api_key:
        raise MissingCredentialError("Please add your Gemini API key in Settings first")
    partial = client.analyze_resume_document(api_key, data, filename)
    store.update_resume(**partial)
    log.info("Imported résumé from %s", filename or "upload")
    return partial
