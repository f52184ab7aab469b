# skillgap/prompts.py
# ─────────────────────────────────────────────────────────────────────────────
# Prompt builders. Pure functions: same inputs, same prompt, no I/O.
#
# Each prompt declares its JSON schema verbatim so the model has a concrete
# contract to target; the parser enforces that contract on the way back.
# ─────────────────────────────────────────────────────────────────────────────

from typing import Optional

from config import MAX_RESUME_CHARS
from .schemas import CandidateProfile, JobDetails, ResumeAnalysis

NO_RESUME_TEXT   = "No resume text provided"
EXTRACTION_FAILED_TEXT = "Could not extract resume text"
NOT_ANALYZED     = "Not analyzed"
NOT_PROVIDED     = "Not provided"
NOT_SPECIFIED    = "Not specified"
NONE_SPECIFIED   = "None specified"


def smart_truncate(text: str, max_chars: int = MAX_RESUME_CHARS) -> str:
    """
    Keep the first 60% and the last 20% of an over-long document.

    The opening (summary, skills) and the tail (recent roles, projects) carry
    most of the signal; the middle is dropped with a visible marker.
    """
    if len(text) <= max_chars:
        return text

    first_part = text[:int(max_chars * 0.6)]
    last_part  = text[-int(max_chars * 0.2):]
    return first_part + "\n\n...[middle section truncated for length]...\n\n" + last_part


def _join(items, empty: str) -> str:
    return ", ".join(str(i) for i in items if str(i).strip()) or empty


# ─────────────────────────────────────────────────────────────────────────────
# PROMPT 1 — Resume analysis
# ─────────────────────────────────────────────────────────────────────────────

_RESUME_PROMPT = """You are an expert technical recruiter and career coach. Analyze the following resume/profile comprehensively.

**Resume Content:**
{resume_text}

**User's Self-Reported Skills:**
{skills}

**Experience Level:** {experience_level}
**Portfolio:** {portfolio}
**GitHub:** {github}

**Task:**
Provide a detailed analysis in valid JSON format with this EXACT structure:

{{
  "skillsReview": {{
    "strong": [
      {{"skill": "string", "evidence": "string"}}
    ],
    "weak": [
      {{"skill": "string", "reason": "string"}}
    ],
    "toImprove": [
      {{"skill": "string", "current": "string", "target": "string"}}
    ]
  }},
  "projectsReview": [
    {{
      "projectName": "string",
      "description": "string",
      "strong": ["string"],
      "weak": ["string"],
      "toImprove": ["string"],
      "skillsDemonstrated": ["string"]
    }}
  ],
  "overallAssessment": {{
    "strengths": ["string"],
    "weaknesses": ["string"],
    "careerLevel": "string",
    "recommendations": ["string"]
  }}
}}

Analyze the resume content carefully. Extract all projects, work experience, and skills demonstrated. Be specific and provide evidence from the resume.
Use [] for empty lists, never null.

IMPORTANT: Return ONLY valid JSON, no additional text."""


def build_resume_prompt(profile: CandidateProfile, resume_text: Optional[str] = "") -> str:
    text = (resume_text or "").strip()
    return _RESUME_PROMPT.format(
        resume_text=smart_truncate(text) if text else NO_RESUME_TEXT,
        skills=_join(profile.skills, NONE_SPECIFIED),
        experience_level=profile.experience_level or "Beginner",
        portfolio=profile.portfolio or NOT_PROVIDED,
        github=profile.github_profile or NOT_PROVIDED,
    )


# ─────────────────────────────────────────────────────────────────────────────
# PROMPT 2 — Skill gap analysis
# ─────────────────────────────────────────────────────────────────────────────

_GAP_PROMPT = """You are an expert technical recruiter specializing in skill gap analysis. Compare a candidate's profile against a job description to identify gaps and provide actionable recommendations.

**Context:**
- This is for a user trying to determine if they're ready for a role
- Be honest but constructive
- Provide specific, actionable guidance

**Job Posting:**
Title: {title}
Company: {company}
Experience Level: {job_level}

Description:
{description}

Requirements:
{requirements}

**Candidate Profile:**
Experience Level: {experience_level}
Skills: {skills}

Resume Analysis - Strong Skills: {strong_skills}
Resume Analysis - Weak Skills: {weak_skills}

**Task:**
Provide a comprehensive gap analysis in valid JSON format with this EXACT structure:

{{
  "matchPercentage": 0-100,
  "matchSummary": "string (2-3 sentences)",
  "strengths": [
    {{
      "skill": "string",
      "evidence": "string",
      "relevance": "string"
    }}
  ],
  "criticalGaps": [
    {{
      "requirement": "string",
      "priority": "Critical|High|Medium",
      "impact": "string",
      "difficulty": "Easy|Medium|Hard"
    }}
  ],
  "proficiencyGaps": [
    {{
      "skill": "string",
      "userLevel": "string",
      "requiredLevel": "string",
      "evidence": "string"
    }}
  ],
  "recommendedActions": [
    {{
      "action": "string",
      "skill": "string",
      "estimatedTime": "string",
      "priority": 1-5,
      "resources": ["string"]
    }}
  ],
  "timelineAssessment": {{
    "estimatedTimeToReady": "string",
    "confidence": "High|Medium|Low",
    "assumptions": "string"
  }}
}}

Be realistic about matchPercentage; it must be a whole number. Identify concrete gaps and provide specific resources.

IMPORTANT: Return ONLY valid JSON, no additional text."""


def build_gap_analysis_prompt(
    profile: CandidateProfile,
    job: JobDetails,
    resume_analysis: Optional[ResumeAnalysis] = None,
) -> str:
    strong, weak = [], []
    if resume_analysis is not None:
        strong = [s.skill for s in resume_analysis.skills_review.strong]
        weak   = [s.skill for s in resume_analysis.skills_review.weak]

    return _GAP_PROMPT.format(
        title=job.title,
        company=job.company or NOT_SPECIFIED,
        job_level=job.experience_level or NOT_SPECIFIED,
        description=job.description,
        requirements=_join(job.requirements, NOT_SPECIFIED),
        experience_level=profile.experience_level or "Beginner",
        skills=_join(profile.skills, NONE_SPECIFIED),
        strong_skills=_join(strong, NOT_ANALYZED),
        weak_skills=_join(weak, NOT_ANALYZED),
    )


# ─────────────────────────────────────────────────────────────────────────────
# PROMPT 3 — Job description draft (company side)
# ─────────────────────────────────────────────────────────────────────────────

_JOB_DESCRIPTION_PROMPT = """You are an experienced technical recruiter writing a job posting.

Write a clear, inclusive job posting from this brief:
{brief}

Return ONLY valid JSON with this EXACT structure:
{{
  "title": "string",
  "description": "string (overview, responsibilities and what we offer, plain text with line breaks)",
  "requirements": ["string"]
}}

Rules:
- 5 to 10 requirements, each a short skill or qualification
- No salary figures unless the brief states them
- No markdown, no code fences"""


def build_job_description_prompt(brief: str) -> str:
    return _JOB_DESCRIPTION_PROMPT.format(brief=brief.strip())
