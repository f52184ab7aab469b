from database import TargetJob, create_user
from skillgap.store import (
    COMPLETED, PENDING, job_key_for_custom, job_key_for_posting, list_target_jobs,
    target_job_to_wire, upsert_target_job,
)

BASE = {"title": "Backend Engineer", "description": "APIs in Python", "company": "Acme", "job_id": None}


def _user(db, auth_id="user_1"):
    return create_user(db, auth_id=auth_id, email=f"{auth_id}@example.com")


def test_first_upsert_creates_pending_record(db):
    user = _user(db)

    record = upsert_target_job(db, user.id, "42", base=BASE)

    assert record.analysis_status == PENDING
    assert record.title == "Backend Engineer"
    assert record.match_percentage is None
    assert record.revision == 0


def test_second_upsert_updates_in_place(db):
    user = _user(db)
    first = upsert_target_job(db, user.id, "42", base=BASE, patch={"match_percentage": 40})
    second = upsert_target_job(db, user.id, "42", base={**BASE, "title": "Ignored"},
                               patch={"match_percentage": 85, "analysis_status": COMPLETED})

    assert second.id == first.id
    assert second.title == "Backend Engineer"
    assert second.match_percentage == 85
    assert second.analysis_status == COMPLETED
    assert second.revision == 2
    assert db.query(TargetJob).filter(TargetJob.user_id == user.id).count() == 1


def test_patch_overwrites_lists_instead_of_appending(db):
    user = _user(db)
    upsert_target_job(db, user.id, "42", base=BASE, patch={"strengths": [{"skill": "Go"}]})
    record = upsert_target_job(db, user.id, "42", patch={"strengths": [{"skill": "Rust"}]})

    assert record.strengths == [{"skill": "Rust"}]


def test_empty_patch_leaves_existing_record_untouched(db):
    user = _user(db)
    upsert_target_job(db, user.id, "42", base=BASE, patch={"analysis_status": COMPLETED})

    record = upsert_target_job(db, user.id, "42", base=BASE)

    assert record.analysis_status == COMPLETED
    assert record.revision == 1


def test_records_are_scoped_per_user(db):
    alice, bob = _user(db, "alice"), _user(db, "bob")
    upsert_target_job(db, alice.id, "42", base=BASE)
    upsert_target_job(db, bob.id, "42", base=BASE)

    assert len(list_target_jobs(db, alice.id)) == 1
    assert len(list_target_jobs(db, bob.id)) == 1


def test_job_keys():
    assert job_key_for_posting(7) == "7"

    key = job_key_for_custom("Analyst", "Numbers.", "Acme")
    assert key.startswith("custom:")
    assert key == job_key_for_custom(" Analyst ", "Numbers.", "Acme")
    assert key != job_key_for_custom("Analyst", "Numbers.", "Other Co")


def test_wire_shape_uses_camel_case(db):
    user = _user(db)
    record = upsert_target_job(db, user.id, "42", base=BASE)

    wire = target_job_to_wire(record)
    assert wire["analysisStatus"] == "Pending"
    assert wire["jobKey"] == "42"
    assert wire["analyzedAt"] is None
