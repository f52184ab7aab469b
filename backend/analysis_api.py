# analysis_api.py
"""
Resume analysis and per-target-job skill-gap analysis endpoints
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth import get_current_user, get_generator
from database import get_db, get_job, update_fields
from exceptions import NotFoundError
from skillgap import CandidateProfile, JobDetails, analyze_target_job, run_resume_analysis
from skillgap.store import COMPLETED, analysis_to_wire, get_target_job

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.post("/resume")
def perform_resume_analysis(user=Depends(get_current_user), db: Session = Depends(get_db),
                            generator=Depends(get_generator)):
    analysis = run_resume_analysis(CandidateProfile.from_user(user), generator)

    # One write replaces the previous analysis wholesale
    user = update_fields(db, user, {"resume_analysis": analysis.to_wire()})

    return {
        "message":  "Resume analysis completed successfully",
        "analysis": user.resume_analysis,
    }


@router.get("/resume")
async def get_resume_analysis(user=Depends(get_current_user)):
    if not user.resume_analysis or not user.resume_analysis.get("analyzedAt"):
        raise NotFoundError(
            "Resume analysis",
            details={"hint": "No resume analysis found. Please run analysis first."},
        )
    return {"analysis": user.resume_analysis}


@router.post("/jobs/{target_job_id}")
def perform_job_analysis(target_job_id: int, user=Depends(get_current_user),
                         db: Session = Depends(get_db), generator=Depends(get_generator)):
    target = get_target_job(db, user.id, target_job_id)
    if not target:
        raise NotFoundError("Target job", target_job_id)

    # Prefer the live posting when the target job points at one
    job = get_job(db, target.job_id) if target.job_id else None
    details = JobDetails.from_job(job) if job else JobDetails.from_target_job(target)

    record, outcome = analyze_target_job(db, user, target.job_key, details, generator)

    return {
        "message":           "Job analysis completed successfully",
        "hasSignificantGap": outcome.has_significant_gap,
        "analysis":          analysis_to_wire(record),
    }


@router.get("/jobs/{target_job_id}")
async def get_job_analysis(target_job_id: int, user=Depends(get_current_user),
                           db: Session = Depends(get_db)):
    target = get_target_job(db, user.id, target_job_id)
    if not target:
        raise NotFoundError("Target job", target_job_id)

    if target.analysis_status != COMPLETED:
        raise NotFoundError(
            "Job analysis", target_job_id,
            details={"status": target.analysis_status,
                     "hint": "No analysis found for this job. Please run analysis first."},
        )
    return {"analysis": analysis_to_wire(target)}
