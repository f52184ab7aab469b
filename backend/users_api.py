# users_api.py
"""
Candidate account endpoints: sync, profile, target jobs
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import get_current_user, get_subject
from database import create_user, get_db, get_job, get_user_by_auth_id, get_user_by_email, update_fields
from exceptions import ConflictError, NotFoundError, ValidationError
from models import (
    ProfileUpdateRequest, SyncUserRequest, TargetJobRequest, TargetJobStatusRequest,
    user_to_dict,
)
from skillgap.store import (
    get_target_job, job_key_for_custom, job_key_for_posting, list_target_jobs,
    target_job_to_wire, upsert_target_job,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

# Request field -> ORM column where the names differ
_PROFILE_COLUMNS = {"resume": "resume_url"}


@router.post("/sync")
async def sync_user(request: SyncUserRequest, subject: str = Depends(get_subject),
                    db: Session = Depends(get_db)):
    """Find-or-create the account for the authenticated subject."""
    user = get_user_by_auth_id(db, subject)
    if not user:
        email = request.email.lower().strip()
        if not email:
            raise ValidationError("Email is required.", field="email")
        if get_user_by_email(db, email):
            raise ConflictError("Email already registered", resource="user")
        try:
            user = create_user(
                db,
                auth_id=subject,
                email=email,
                full_name=request.full_name.strip(),
                username=request.username.strip(),
            )
        except IntegrityError:
            # Another request created this subject or email first
            db.rollback()
            raise ConflictError("Email already registered", resource="user")
        logger.info("User created via sync: %s", user.email)

    return {"message": "User synced successfully", "user": user_to_dict(user)}


@router.get("/profile")
async def get_profile(user=Depends(get_current_user)):
    return {"user": user_to_dict(user)}


@router.put("/profile")
async def update_profile(request: ProfileUpdateRequest, user=Depends(get_current_user),
                         db: Session = Depends(get_db)):
    changes = {
        _PROFILE_COLUMNS.get(name, name): value
        for name, value in request.model_dump(exclude_unset=True).items()
    }
    user = update_fields(db, user, changes)
    logger.info("Profile updated for %s: %s", user.auth_id, sorted(changes))
    return {"message": "Profile updated successfully", "user": user_to_dict(user)}


# ─── Target jobs ──────────────────────────────────────────────────────────────

@router.post("/target-jobs")
async def add_target_job(request: TargetJobRequest, user=Depends(get_current_user),
                         db: Session = Depends(get_db)):
    if request.job_id is not None:
        job = get_job(db, request.job_id)
        if not job:
            raise NotFoundError("Job", request.job_id)
        job_key = job_key_for_posting(job.id)
        base = {
            "job_id":      job.id,
            "title":       request.title or job.title,
            "description": request.description or job.description,
            "company":     request.company or job.company_name,
        }
    else:
        if not request.title.strip() or not request.description.strip():
            raise ValidationError("Title and description are required")
        job_key = job_key_for_custom(request.title, request.description, request.company)
        base = {
            "title":       request.title.strip(),
            "description": request.description.strip(),
            "company":     request.company,
        }

    record = upsert_target_job(db, user.id, job_key, base=base)
    return {"message": "Target job added successfully", "targetJob": target_job_to_wire(record)}


@router.get("/target-jobs")
async def get_target_jobs(user=Depends(get_current_user), db: Session = Depends(get_db)):
    records = list_target_jobs(db, user.id)
    return {"targetJobs": [target_job_to_wire(r) for r in records], "count": len(records)}


@router.put("/target-jobs/{target_job_id}/analysis")
async def update_target_job_status(target_job_id: int, request: TargetJobStatusRequest,
                                   user=Depends(get_current_user), db: Session = Depends(get_db)):
    """Manual status / legacy skill-gap list update."""
    record = get_target_job(db, user.id, target_job_id)
    if not record:
        raise NotFoundError("Target job", target_job_id)

    record = upsert_target_job(db, user.id, record.job_key, patch={
        "analysis_status": request.analysis_status,
        "skill_gaps":      request.skill_gaps,
    })
    return {"message": "Job analysis updated successfully", "targetJob": target_job_to_wire(record)}
