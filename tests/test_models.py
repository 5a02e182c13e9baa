"""Tests for entity merge rules and (de)serialisation."""
from datetime import date

import pytest

from jobflow.errors import ValidationError
from jobflow.models import (
    Job,
    Resume,
    Section,
    Settings,
    merge_job,
    merge_resume,
    merge_settings,
    new_job,
    parse_date,
)


def test_parse_date():
    assert parse_date("2024-02-29") == date(2024, 2, 29)
    assert parse_date("2024-02-29T10:00:00Z") == date(2024, 2, 29)
    assert parse_date(date(2020, 1, 1)) == date(2020, 1, 1)
    for bad in ("", "yesterday", None, 20240229):
        with pytest.raises(ValidationError):
            parse_date(bad)


def test_new_job_defaults():
    job = new_job({"company": "Acme", "role": "Dev"})
    assert job.status == "Applied"
    assert job.origin == "application"
    assert job.cover_letter == ""
    assert job.date_applied == date.today()


def test_job_dict_round_trip():
    job = Job(company="Acme", role="Dev", date_applied=date(2024, 1, 5), origin="offer", status="Accepted")
    data = job.to_dict()
    assert data["date_applied"] == "2024-01-05"
    assert Job.from_dict(data) == job


def test_job_from_dict_tolerates_null_text_fields():
    data = Job(company="Acme", role="Dev").to_dict()
    data["cover_letter"] = None
    data["salary"] = None
    job = Job.from_dict(data)
    assert job.cover_letter == ""
    assert job.salary == ""


def test_merge_job_never_touches_origin_implicitly():
    job = Job(company="Acme", role="Dev", origin="offer")
    merged = merge_job(job, {"status": "Rejected"})
    assert merged.origin == "offer"
    assert job.status == "Applied"


def test_merge_resume_assigns_ids_to_new_items():
    resume = merge_resume(Resume(), {"experience": [{"title": "A"}], "full_name": None})
    assert resume.experience[0].id
    assert resume.full_name == ""


def test_merge_resume_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        merge_resume(Resume(), {"hobbies": "chess"})


def test_merge_settings_keeps_untouched_resume_fields():
    settings = Settings(resume=Resume(full_name="Ada", summary="S", experience=[Section(title="E")]), api_key="k")
    merged = merge_settings(settings, {"resume": {"skills": "X"}})
    assert merged.resume.skills == "X"
    assert merged.resume.full_name == "Ada"
    assert merged.resume.summary == "S"
    assert merged.resume.experience == settings.resume.experience
    assert merged.api_key == "k"
    assert settings.resume.skills == ""
