# jobs_api.py
"""
Job postings: public listing, company CRUD, candidate evaluate/apply,
company applicant views
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth import get_current_company, get_current_user, get_generator
from database import (
    APPLICATION_STATUSES, Job, add_applicant, create_job, get_application, get_company_job, get_db,
    get_job, has_applied, list_jobs, record_job_view, update_fields,
)
from exceptions import ConflictError, NotFoundError, PreconditionError, ValidationError
from models import (
    ApplicantStatusRequest, GenerateDescriptionRequest, JobCreateRequest, JobUpdateRequest,
    applicant_to_dict, job_to_dict,
)
from skillgap import JobDetails, analyze_target_job, generate_job_description
from skillgap.store import job_key_for_posting, upsert_target_job

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def _job_columns(fields: dict) -> dict:
    """Flatten the request's salaryRange into the salary_* columns."""
    salary_range = fields.pop("salary_range", None)
    if salary_range:
        fields["salary_min"] = salary_range.get("min")
        fields["salary_max"] = salary_range.get("max")
        fields["salary_currency"] = salary_range.get("currency") or "USD"
    return fields


def _target_base(job: Job) -> dict:
    return {
        "job_id":      job.id,
        "title":       job.title,
        "description": job.description,
        "company":     job.company_name,
    }


def _require_job(db, job_id: int) -> Job:
    job = get_job(db, job_id)
    if not job:
        raise NotFoundError("Job", job_id)
    return job


def _require_company_job(db, job_id: int, company) -> Job:
    job = get_company_job(db, job_id, company.id)
    if not job:
        raise NotFoundError("Job", job_id, details={"hint": "Job not found or access denied"})
    return job


# ─── Company side ─────────────────────────────────────────────────────────────
# Static paths are registered before /{job_id}

@router.get("/company/my-jobs")
async def get_company_jobs(company=Depends(get_current_company), db: Session = Depends(get_db)):
    jobs = list_jobs(db, company_id=company.id)
    return {"jobs": [job_to_dict(j) for j in jobs], "count": len(jobs)}


@router.get("/company/applicants")
async def get_all_company_applicants(company=Depends(get_current_company),
                                     db: Session = Depends(get_db)):
    applicants = []
    for job in list_jobs(db, company_id=company.id):
        for application in job.applicants:
            if application.user is None:
                continue
            entry = applicant_to_dict(application)
            entry["job"] = {"id": job.id, "title": job.title, "location": job.location, "type": job.type}
            applicants.append(entry)

    applicants.sort(key=lambda a: a["appliedAt"] or "", reverse=True)
    return {"applicants": applicants, "count": len(applicants)}


@router.get("/company/stats")
async def get_company_stats(company=Depends(get_current_company), db: Session = Depends(get_db)):
    """Dashboard totals across all of the company's postings."""
    jobs = list_jobs(db, company_id=company.id)
    applications = [a for job in jobs for a in job.applicants]

    statuses = Counter(a.status for a in applications)
    since = datetime.utcnow() - timedelta(days=7)

    most_applied = sorted(jobs, key=lambda j: len(j.applicants), reverse=True)[:5]

    return {
        "totalJobs":        len(jobs),
        "activeJobs":       sum(1 for j in jobs if j.status == "Active"),
        "totalViews":       sum(j.views or 0 for j in jobs),
        "totalApplicants":  len(applications),
        "recentApplicants": sum(1 for a in applications if a.applied_at and a.applied_at >= since),
        "statusBreakdown":  {status: statuses.get(status, 0) for status in APPLICATION_STATUSES},
        "jobsWithMostApplicants": [
            {"id": j.id, "title": j.title, "applicants": len(j.applicants)} for j in most_applied
        ],
    }


@router.post("/generate-description")
def generate_description(request: GenerateDescriptionRequest, company=Depends(get_current_company),
                         generator=Depends(get_generator)):
    if not request.prompt.strip():
        raise PreconditionError("Prompt is required", error_code="VALIDATION_ERROR")
    brief = f"{request.prompt.strip()}\nCompany: {company.company_name}"
    draft = generate_job_description(brief, generator)
    return {"data": draft.to_wire()}


@router.post("", status_code=201)
async def create_job_posting(request: JobCreateRequest, company=Depends(get_current_company),
                             db: Session = Depends(get_db)):
    fields = _job_columns(request.model_dump())
    job = create_job(db, company, **fields)
    logger.info("Job created: %s (%s) by %s", job.title, job.id, company.company_name)
    return {"message": "Job created successfully", "job": job_to_dict(job)}


@router.put("/{job_id}")
async def update_job_posting(job_id: int, request: JobUpdateRequest,
                             company=Depends(get_current_company), db: Session = Depends(get_db)):
    job = _require_company_job(db, job_id, company)
    job = update_fields(db, job, _job_columns(request.model_dump(exclude_unset=True)))
    return {"message": "Job updated successfully", "job": job_to_dict(job)}


@router.delete("/{job_id}")
async def delete_job_posting(job_id: int, company=Depends(get_current_company),
                             db: Session = Depends(get_db)):
    job = _require_company_job(db, job_id, company)
    db.delete(job)
    db.commit()
    logger.info("Job deleted: %s by %s", job_id, company.company_name)
    return {"message": "Job deleted successfully"}


@router.get("/{job_id}/applicants")
async def get_job_applicants(job_id: int, company=Depends(get_current_company),
                             db: Session = Depends(get_db)):
    job = _require_company_job(db, job_id, company)
    applicants = [applicant_to_dict(a) for a in job.applicants]
    return {
        "job": {"id": job.id, "title": job.title, "location": job.location, "type": job.type},
        "applicants": applicants,
        "count": len(applicants),
    }


@router.put("/{job_id}/applicants/{application_id}/status")
async def update_applicant_status(job_id: int, application_id: int, request: ApplicantStatusRequest,
                                  company=Depends(get_current_company), db: Session = Depends(get_db)):
    if request.status not in APPLICATION_STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(APPLICATION_STATUSES)}", field="status",
        )

    job = _require_company_job(db, job_id, company)
    application = get_application(db, job.id, application_id)
    if not application:
        raise NotFoundError("Applicant", application_id)

    update_fields(db, application, {"status": request.status})
    logger.info("Application %s on job %s moved to %s", application_id, job_id, request.status)
    return {
        "message":       "Applicant status updated successfully",
        "applicationId": application_id,
        "newStatus":     request.status,
    }


# ─── Public ───────────────────────────────────────────────────────────────────

@router.get("")
async def get_jobs(
    status: Optional[str] = None,
    type: Optional[str] = None,
    experience_level: Optional[str] = Query(None, alias="experienceLevel"),
    company_id: Optional[int] = Query(None, alias="companyId"),
    db: Session = Depends(get_db),
):
    jobs = list_jobs(db, status=status, type=type,
                     experience_level=experience_level, company_id=company_id)
    return {"jobs": [job_to_dict(j) for j in jobs], "count": len(jobs)}


@router.get("/{job_id}")
async def get_job_by_id(job_id: int, db: Session = Depends(get_db)):
    job = record_job_view(db, _require_job(db, job_id))
    return {"job": job_to_dict(job)}


# ─── Candidate side ───────────────────────────────────────────────────────────

@router.post("/{job_id}/evaluate")
def evaluate_skill_gap(job_id: int, user=Depends(get_current_user), db: Session = Depends(get_db),
                       generator=Depends(get_generator)):
    """Gap analysis for a posting before applying; stored on the user's target job."""
    if not user.resume_url:
        raise PreconditionError(
            "Please upload your resume first before applying.",
            error_code="RESUME_REQUIRED",
            details={"requiresResume": True},
        )

    job = _require_job(db, job_id)
    if has_applied(db, job.id, user.id):
        raise ConflictError("You have already applied to this job", resource="application")

    record, outcome = analyze_target_job(
        db, user, job_key_for_posting(job.id), JobDetails.from_job(job), generator,
        base=_target_base(job),
    )

    return {
        "hasSignificantGap": outcome.has_significant_gap,
        **outcome.analysis.to_wire(),
        "jobId":       job.id,
        "jobTitle":    job.title,
        "companyName": job.company_name,
        "targetJobId": record.id,
    }


@router.post("/{job_id}/apply")
async def apply_to_job(job_id: int, user=Depends(get_current_user), db: Session = Depends(get_db)):
    job = _require_job(db, job_id)
    if has_applied(db, job.id, user.id):
        raise ConflictError("You have already applied to this job", resource="application")

    try:
        add_applicant(db, job, user)
    except IntegrityError:
        db.rollback()
        raise ConflictError("You have already applied to this job", resource="application")

    # Track the job for gap analysis; an existing record is left as it is
    upsert_target_job(db, user.id, job_key_for_posting(job.id), base=_target_base(job))

    logger.info("User %s applied to job %s", user.auth_id, job.id)
    return {"message": "Application submitted successfully", "jobId": job.id, "jobTitle": job.title}
