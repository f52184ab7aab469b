from .orchestrator import (
    analyze_target_job,
    generate_job_description,
    has_significant_gap,
    run_gap_analysis,
    run_resume_analysis,
)
from .schemas import CandidateProfile, GapAnalysis, GapAnalysisOutcome, JobDetails, ResumeAnalysis

__all__ = [
    "analyze_target_job",
    "generate_job_description",
    "has_significant_gap",
    "run_gap_analysis",
    "run_resume_analysis",
    "CandidateProfile",
    "GapAnalysis",
    "GapAnalysisOutcome",
    "JobDetails",
    "ResumeAnalysis",
]
