# skillgap/schemas.py
# ─────────────────────────────────────────────────────────────────────────────
# Shapes flowing through the analysis pipeline.
#
# Inputs (CandidateProfile, JobDetails) are plain dataclasses read off the ORM.
# Outputs are pydantic models used as strict decoders for model replies: a
# reply either validates completely or is rejected. Field names on the wire
# are camelCase to stay compatible with stored records.
# ─────────────────────────────────────────────────────────────────────────────

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ── Resume analysis ──────────────────────────────────────────────────────────

class StrongSkill(_Wire):
    skill: str
    evidence: str


class WeakSkill(_Wire):
    skill: str
    reason: str


class SkillToImprove(_Wire):
    skill: str
    current: str
    target: str


class SkillsReview(_Wire):
    strong: List[StrongSkill]
    weak: List[WeakSkill]
    to_improve: List[SkillToImprove]


class ProjectReview(_Wire):
    project_name: str
    description: str
    strong: List[str]
    weak: List[str]
    to_improve: List[str]
    skills_demonstrated: List[str]


class OverallAssessment(_Wire):
    strengths: List[str]
    weaknesses: List[str]
    career_level: str
    recommendations: List[str]


class ResumeAnalysis(_Wire):
    skills_review: SkillsReview
    projects_review: List[ProjectReview]
    overall_assessment: OverallAssessment
    analyzed_at: Optional[datetime] = None


# ── Gap analysis ─────────────────────────────────────────────────────────────

class Strength(_Wire):
    skill: str
    evidence: str
    relevance: str


class CriticalGap(_Wire):
    requirement: str
    priority: Literal["Critical", "High", "Medium"]
    impact: str
    difficulty: Literal["Easy", "Medium", "Hard"]


class ProficiencyGap(_Wire):
    skill: str
    user_level: str
    required_level: str
    evidence: str


class RecommendedAction(_Wire):
    action: str
    skill: str
    estimated_time: str
    priority: StrictInt = Field(ge=1, le=5)
    resources: List[str]


class TimelineAssessment(_Wire):
    estimated_time_to_ready: str
    confidence: Literal["High", "Medium", "Low"]
    assumptions: str


class GapAnalysis(_Wire):
    match_percentage: StrictInt = Field(ge=0, le=100)
    match_summary: str
    strengths: List[Strength]
    critical_gaps: List[CriticalGap]
    proficiency_gaps: List[ProficiencyGap]
    recommended_actions: List[RecommendedAction]
    timeline_assessment: TimelineAssessment


class JobDescriptionDraft(_Wire):
    title: str
    description: str
    requirements: List[str]


# ── Pipeline inputs ──────────────────────────────────────────────────────────

@dataclass
class CandidateProfile:
    auth_id: str
    skills: List[str] = field(default_factory=list)
    experience_level: str = "Beginner"
    portfolio: Optional[str] = None
    github_profile: Optional[str] = None
    resume_url: Optional[str] = None
    resume_analysis: Optional[ResumeAnalysis] = None

    @classmethod
    def from_user(cls, user) -> "CandidateProfile":
        prior = None
        if user.resume_analysis:
            try:
                prior = ResumeAnalysis.model_validate(user.resume_analysis)
            except ValidationError as e:
                # Older stored analyses may lack fields; analyse without them
                logger.warning("Ignoring stored resume analysis for %s (%d validation errors)",
                               user.auth_id, e.error_count())
        return cls(
            auth_id=user.auth_id,
            skills=list(user.skills or []),
            experience_level=user.experience_level or "Beginner",
            portfolio=user.portfolio,
            github_profile=user.github_profile,
            resume_url=user.resume_url,
            resume_analysis=prior,
        )


@dataclass
class JobDetails:
    title: str
    description: str
    company: Optional[str] = None
    requirements: List[str] = field(default_factory=list)
    experience_level: Optional[str] = None

    @classmethod
    def from_job(cls, job) -> "JobDetails":
        return cls(
            title=job.title,
            description=job.description,
            company=job.company_name,
            requirements=list(job.requirements or []),
            experience_level=job.experience_level,
        )

    @classmethod
    def from_target_job(cls, target) -> "JobDetails":
        return cls(title=target.title, description=target.description, company=target.company)


@dataclass
class GapAnalysisOutcome:
    analysis: GapAnalysis
    has_significant_gap: bool
