from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request bodies accept camelCase (the public API) or snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


ExperienceLevel    = Literal["Beginner", "Intermediate", "Senior"]
JobType            = Literal["Full-time", "Part-time", "Contract", "Internship"]
JobExperienceLevel = Literal["Entry", "Mid", "Senior", "Lead"]
JobStatus          = Literal["Active", "Closed", "Draft"]
CompanySize        = Literal["Startup", "Small", "Medium", "Large", "Enterprise"]
AnalysisStatus     = Literal["Pending", "Completed", "Failed"]


# ── Users ─────────────────────────────────────────────────────────────────────

class SyncUserRequest(CamelModel):
    email: str
    full_name: str = ""
    username: str = ""


class ProfileUpdateRequest(CamelModel):
    full_name: Optional[str] = None
    username: Optional[str] = None
    resume: Optional[str] = None
    github_id: Optional[str] = None
    github_profile: Optional[str] = None
    linkedin_profile: Optional[str] = None
    portfolio: Optional[str] = None
    skills: Optional[List[str]] = None
    experience_level: Optional[ExperienceLevel] = None
    profile_completed: Optional[bool] = None


class TargetJobRequest(CamelModel):
    job_id: Optional[int] = None
    title: str = ""
    description: str = ""
    company: Optional[str] = None


class TargetJobStatusRequest(CamelModel):
    analysis_status: AnalysisStatus
    skill_gaps: List[str] = Field(default_factory=list)


# ── Companies ─────────────────────────────────────────────────────────────────

class CompanyRegisterRequest(CamelModel):
    company_name: str
    email: str
    website: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[CompanySize] = None


class CompanyUpdateRequest(CamelModel):
    company_name: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[CompanySize] = None


# ── Jobs ──────────────────────────────────────────────────────────────────────

class SalaryRange(CamelModel):
    min: Optional[int] = None
    max: Optional[int] = None
    currency: str = "USD"


class JobCreateRequest(CamelModel):
    title: str
    description: str
    requirements: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    type: JobType = "Full-time"
    experience_level: Optional[JobExperienceLevel] = None
    salary: Optional[str] = None
    salary_range: Optional[SalaryRange] = None
    status: JobStatus = "Active"


class JobUpdateRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[List[str]] = None
    location: Optional[str] = None
    type: Optional[JobType] = None
    experience_level: Optional[JobExperienceLevel] = None
    salary: Optional[str] = None
    salary_range: Optional[SalaryRange] = None
    status: Optional[JobStatus] = None


class GenerateDescriptionRequest(CamelModel):
    prompt: str


class ApplicantStatusRequest(CamelModel):
    # Checked against APPLICATION_STATUSES in the route so the error is a 400
    status: str


# ── Serialisers ───────────────────────────────────────────────────────────────

def _iso(value):
    return value.isoformat() if value else None


def user_to_dict(user) -> dict:
    return {
        "id":               user.id,
        "authId":           user.auth_id,
        "email":            user.email,
        "fullName":         user.full_name,
        "username":         user.username,
        "role":             user.role,
        "profileCompleted": user.profile_completed,
        "resume":           user.resume_url,
        "githubId":         user.github_id,
        "githubProfile":    user.github_profile,
        "linkedinProfile":  user.linkedin_profile,
        "portfolio":        user.portfolio,
        "skills":           user.skills or [],
        "experienceLevel":  user.experience_level,
        "resumeAnalysis":   user.resume_analysis,
        "createdAt":        _iso(user.created_at),
    }


def company_to_dict(company) -> dict:
    return {
        "id":          company.id,
        "companyName": company.company_name,
        "email":       company.email,
        "website":     company.website,
        "description": company.description,
        "logo":        company.logo,
        "industry":    company.industry,
        "size":        company.size,
        "verified":    company.verified,
        "createdAt":   _iso(company.created_at),
    }


def job_to_dict(job) -> dict:
    return {
        "id":              job.id,
        "companyId":       job.company_id,
        "companyName":     job.company_name,
        "title":           job.title,
        "description":     job.description,
        "requirements":    job.requirements or [],
        "location":        job.location,
        "type":            job.type,
        "experienceLevel": job.experience_level,
        "salary":          job.salary,
        "salaryRange": {
            "min":      job.salary_min,
            "max":      job.salary_max,
            "currency": job.salary_currency,
        },
        "status":          job.status,
        "views":           job.views,
        "applicantCount":  len(job.applicants),
        "createdAt":       _iso(job.created_at),
    }


def applicant_to_dict(application) -> dict:
    user = application.user
    return {
        "applicationId": application.id,
        "userId":        application.user_id,
        "appliedAt":     _iso(application.applied_at),
        "status":        application.status,
        "user": {
            "fullName":        user.full_name,
            "email":           user.email,
            "skills":          user.skills or [],
            "experienceLevel": user.experience_level,
            "resume":          user.resume_url,
            "linkedinProfile": user.linkedin_profile,
            "githubProfile":   user.github_profile,
            "portfolio":       user.portfolio,
            "resumeAnalysis":  (user.resume_analysis or {}).get("overallAssessment"),
        } if user else None,
    }
