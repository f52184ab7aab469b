# skillgap/store.py
# ─────────────────────────────────────────────────────────────────────────────
# Target-job records: one row per (user, job_key).
#
# upsert_target_job is find-or-create-then-overwrite. Patched fields are
# replaced wholesale, never merged or appended. There is no cross-request
# locking: two racing writers for the same key end with the last write, and
# the unique constraint keeps them from creating two rows.
# ─────────────────────────────────────────────────────────────────────────────

import hashlib
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from database import TargetJob
from .schemas import GapAnalysis

logger = logging.getLogger(__name__)

PENDING   = "Pending"
COMPLETED = "Completed"
FAILED    = "Failed"

_BASE_FIELDS = ("title", "description", "company", "job_id")


def job_key_for_posting(job_id) -> str:
    return str(job_id)


def job_key_for_custom(title: str, description: str, company: Optional[str] = None) -> str:
    """Stable key for a free-standing target job, so re-adding it is idempotent."""
    digest = hashlib.sha1(
        f"{title.strip()}|{(company or '').strip()}|{description.strip()}".encode("utf-8")
    ).hexdigest()
    return f"custom:{digest[:16]}"


def find_target_job(db, user_id: int, job_key: str) -> Optional[TargetJob]:
    return db.query(TargetJob).filter(
        TargetJob.user_id == user_id,
        TargetJob.job_key == job_key,
    ).first()


def get_target_job(db, user_id: int, target_job_id: int) -> Optional[TargetJob]:
    return db.query(TargetJob).filter(
        TargetJob.user_id == user_id,
        TargetJob.id == target_job_id,
    ).first()


def list_target_jobs(db, user_id: int):
    return db.query(TargetJob).filter(TargetJob.user_id == user_id).order_by(TargetJob.id).all()


def upsert_target_job(
    db,
    user_id: int,
    job_key: str,
    base: Optional[dict] = None,
    patch: Optional[dict] = None,
) -> TargetJob:
    """
    Find the record for (user_id, job_key), creating it as Pending from `base`
    when absent, then overwrite every field in `patch` and commit.
    """
    record = find_target_job(db, user_id, job_key)

    if record is None:
        fields = {k: v for k, v in (base or {}).items() if k in _BASE_FIELDS}
        record = TargetJob(
            user_id=user_id,
            job_key=job_key,
            analysis_status=PENDING,
            skill_gaps=[],
            revision=0,
            **fields,
        )
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request created the same key first
            db.rollback()
            record = find_target_job(db, user_id, job_key)
            if record is None:
                raise
            logger.info("Target job %s/%s created concurrently, updating in place", user_id, job_key)
        else:
            db.refresh(record)
            logger.info("Target job created: user=%s key=%s id=%s", user_id, job_key, record.id)

    if patch:
        for name, value in patch.items():
            setattr(record, name, value)
        record.revision = (record.revision or 0) + 1
        db.commit()
        db.refresh(record)

    return record


# ── Status transitions ──────────────────────────────────────────────────────

def completed_patch(analysis: GapAnalysis, analyzed_at: Optional[datetime] = None) -> dict:
    wire = analysis.to_wire()
    return {
        "analysis_status":     COMPLETED,
        "match_percentage":    analysis.match_percentage,
        "match_summary":       analysis.match_summary,
        "strengths":           wire["strengths"],
        "critical_gaps":       wire["criticalGaps"],
        "proficiency_gaps":    wire["proficiencyGaps"],
        "recommended_actions": wire["recommendedActions"],
        "timeline_assessment": wire["timelineAssessment"],
        "analyzed_at":         analyzed_at or datetime.utcnow(),
    }


def analysis_to_wire(record: TargetJob) -> dict:
    """The stored analysis fields in their camelCase wire shape."""
    return {
        "matchPercentage":    record.match_percentage,
        "matchSummary":       record.match_summary,
        "strengths":          record.strengths,
        "criticalGaps":       record.critical_gaps,
        "proficiencyGaps":    record.proficiency_gaps,
        "recommendedActions": record.recommended_actions,
        "timelineAssessment": record.timeline_assessment,
        "analyzedAt":         record.analyzed_at.isoformat() if record.analyzed_at else None,
    }


def target_job_to_wire(record: TargetJob) -> dict:
    return {
        "id":             record.id,
        "jobId":          record.job_id,
        "jobKey":         record.job_key,
        "title":          record.title,
        "description":    record.description,
        "company":        record.company,
        "analysisStatus": record.analysis_status,
        "skillGaps":      record.skill_gaps or [],
        "revision":       record.revision,
        **analysis_to_wire(record),
    }
