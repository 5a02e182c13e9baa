"""Tests for the JSON file persistence adapter."""
import json

import pytest

from jobflow.storage import JsonFileStorage, StorageError
from jobflow.store import JobStore


def test_missing_file_loads_none(tmp_path):
    assert JsonFileStorage(tmp_path).load("jobs") is None


def test_save_then_load_round_trips(tmp_path):
    storage = JsonFileStorage(tmp_path / "nested")
    snapshot = [{"id": "1", "company": "Zürich AG", "tech": ["a", "b"]}]
    storage.save("jobs", snapshot)

    assert storage.load("jobs") == snapshot
    assert (tmp_path / "nested" / "jobflow_jobs.json").exists()
    assert not list((tmp_path / "nested").glob("*.tmp"))


def test_corrupt_file_raises_storage_error(tmp_path):
    (tmp_path / "jobflow_settings.json").write_text("{oops", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStorage(tmp_path).load("settings")


def test_unknown_key_rejected(tmp_path):
    with pytest.raises(KeyError):
        JsonFileStorage(tmp_path).save("passwords", {})


def test_store_recovers_from_corrupt_files(tmp_path):
    (tmp_path / "jobflow_jobs.json").write_text("not json", encoding="utf-8")
    (tmp_path / "jobflow_resume.json").write_text("", encoding="utf-8")
    store = JobStore(JsonFileStorage(tmp_path))
    assert store.jobs == []

    store.add_job(company="Acme", role="Dev", date_applied="2024-05-01")
    data = json.loads((tmp_path / "jobflow_jobs.json").read_text(encoding="utf-8"))
    assert data[0]["company"] == "Acme"
    assert data[0]["date_applied"] == "2024-05-01"


def test_store_round_trip_through_files(tmp_path):
    store = JobStore(JsonFileStorage(tmp_path))
    job = store.add_job(company="Acme", role="Dev", salary="", interview_guide="## Prep", origin="offer")
    store.add_education(title="BSc", content="Maths", date="2016")
    store.update_resume(avatar="data:image/png;base64,AAAA", phone="+1 555")

    again = JobStore(JsonFileStorage(tmp_path))
    assert again.get_job(job.id) == job
    assert again.resume == store.resume


def test_undecodable_file_raises_storage_error(tmp_path):
    (tmp_path / "jobflow_jobs.json").write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(StorageError):
        JsonFileStorage(tmp_path).load("jobs")


def test_store_recovers_from_undecodable_file(tmp_path):
    (tmp_path / "jobflow_jobs.json").write_bytes(b"\xff\xfe\x00garbage")
    store = JobStore(JsonFileStorage(tmp_path))
    assert store.jobs == []
