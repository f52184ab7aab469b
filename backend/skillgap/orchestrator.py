# skillgap/orchestrator.py
# ─────────────────────────────────────────────────────────────────────────────
# Analysis pipeline.
#
# Flow (strictly sequential, one attempt per call):
#   1. extract resume text            (resume analysis only; failure degrades)
#   2. build the prompt
#   3. call the model
#   4. parse the reply strictly
#   5. persist                        (caller for resume, here for target jobs)
#
# Every failure after step 1 becomes an AnalysisError. Nothing is retried.
# ─────────────────────────────────────────────────────────────────────────────

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from config import SKILL_GAP_THRESHOLD
from exceptions import AnalysisError, AppException, ExtractionError
from .extractor import extract_text
from .llm import TextGenerator
from .parser import parse_model_response
from .prompts import (
    EXTRACTION_FAILED_TEXT,
    build_gap_analysis_prompt,
    build_job_description_prompt,
    build_resume_prompt,
)
from .schemas import (
    CandidateProfile,
    GapAnalysis,
    GapAnalysisOutcome,
    JobDescriptionDraft,
    JobDetails,
    ResumeAnalysis,
)
from .store import FAILED, PENDING, completed_patch, upsert_target_job

logger = logging.getLogger(__name__)


def _generate_and_parse(generator: TextGenerator, prompt: str, schema):
    try:
        raw = generator.generate(prompt)
        return parse_model_response(raw, schema)
    except AppException as e:
        raise AnalysisError.from_exception(e) from e
    except Exception as e:
        # A generator outside ClaudeClient may raise anything; it still counts as a model failure
        logger.error("Model call raised %s: %s", type(e).__name__, e, exc_info=True)
        raise AnalysisError("model", e) from e


def has_significant_gap(match_percentage: int, threshold: int = SKILL_GAP_THRESHOLD) -> bool:
    return match_percentage < threshold


# ─────────────────────────────────────────────────────────────────────────────
# Resume analysis
# ─────────────────────────────────────────────────────────────────────────────

def run_resume_analysis(
    profile: CandidateProfile,
    generator: TextGenerator,
    extract: Callable[[str], str] = extract_text,
) -> ResumeAnalysis:
    """
    Analyse the candidate's resume and self-reported profile.

    An unreadable resume does not abort the run: the prompt carries a
    placeholder and the model works from the self-reported skills alone.
    The returned analysis is stamped with analyzed_at; storing it is the
    caller's job and must replace any previous analysis in one write.
    """
    resume_text = ""
    if profile.resume_url:
        try:
            resume_text = extract(profile.resume_url)
        except ExtractionError as e:
            logger.warning("Resume extraction failed for %s, continuing without it: %s",
                           profile.auth_id, e.message)
            resume_text = EXTRACTION_FAILED_TEXT

    prompt = build_resume_prompt(profile, resume_text)
    analysis = _generate_and_parse(generator, prompt, ResumeAnalysis)
    analysis.analyzed_at = datetime.utcnow()

    logger.info(
        "Resume analysis complete for %s: %d strong, %d weak, %d projects",
        profile.auth_id,
        len(analysis.skills_review.strong),
        len(analysis.skills_review.weak),
        len(analysis.projects_review),
    )
    return analysis


# ─────────────────────────────────────────────────────────────────────────────
# Gap analysis
# ─────────────────────────────────────────────────────────────────────────────

def run_gap_analysis(
    profile: CandidateProfile,
    job: JobDetails,
    generator: TextGenerator,
    resume_analysis: Optional[ResumeAnalysis] = None,
    threshold: int = SKILL_GAP_THRESHOLD,
) -> GapAnalysisOutcome:
    """Compare the candidate against one job. No text extraction happens here."""
    prompt = build_gap_analysis_prompt(profile, job, resume_analysis)
    analysis = _generate_and_parse(generator, prompt, GapAnalysis)

    outcome = GapAnalysisOutcome(
        analysis=analysis,
        has_significant_gap=has_significant_gap(analysis.match_percentage, threshold),
    )
    logger.info(
        "Gap analysis complete for %s vs %r: %d%% (significant gap: %s)",
        profile.auth_id, job.title, analysis.match_percentage, outcome.has_significant_gap,
    )
    return outcome


def analyze_target_job(
    db,
    user,
    job_key: str,
    job: JobDetails,
    generator: TextGenerator,
    base: Optional[dict] = None,
    threshold: int = SKILL_GAP_THRESHOLD,
) -> Tuple[object, GapAnalysisOutcome]:
    """
    Run one gap-analysis attempt for the user's target job and record it.

    The record is (re)set to Pending, then moves to Completed with all
    analysis fields, or to Failed with the previous fields left as they were.
    On failure the AnalysisError is re-raised after the status is written.
    """
    profile = CandidateProfile.from_user(user)
    upsert_target_job(db, user.id, job_key, base=base, patch={"analysis_status": PENDING})

    try:
        outcome = run_gap_analysis(profile, job, generator, profile.resume_analysis, threshold)
    except AnalysisError as e:
        logger.error("Gap analysis failed for user=%s key=%s: [%s] %s",
                     user.id, job_key, e.kind, e.message)
        upsert_target_job(db, user.id, job_key, patch={"analysis_status": FAILED})
        raise

    record = upsert_target_job(db, user.id, job_key, patch=completed_patch(outcome.analysis))
    return record, outcome


# ─────────────────────────────────────────────────────────────────────────────
# Job description draft
# ─────────────────────────────────────────────────────────────────────────────

def generate_job_description(brief: str, generator: TextGenerator) -> JobDescriptionDraft:
    draft = _generate_and_parse(generator, build_job_description_prompt(brief), JobDescriptionDraft)
    logger.info("Job description drafted: %r (%d requirements)", draft.title, len(draft.requirements))
    return draft
