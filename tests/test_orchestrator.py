import pytest

from database import TargetJob, create_user, update_fields
from exceptions import AnalysisError, ExtractionError, ModelInvocationError
from skillgap import (
    CandidateProfile, JobDetails, analyze_target_job, has_significant_gap,
    run_gap_analysis, run_resume_analysis,
)
from skillgap.prompts import EXTRACTION_FAILED_TEXT
from skillgap.schemas import ResumeAnalysis
from skillgap.store import COMPLETED, FAILED, PENDING, upsert_target_job
from fakes import RESUME_ANALYSIS, FakeGenerator, gap_reply, resume_reply

JOB = JobDetails(title="Platform Engineer", description="Kubernetes all day.", company="CloudOps Inc",
                 requirements=["Kubernetes"], experience_level="Mid")


def _profile(**kwargs):
    return CandidateProfile(auth_id="user_1", skills=["Python"], **kwargs)


def _unreachable(uri):
    raise ExtractionError("unreachable", uri=uri)


class TestResumeAnalysis:

    def test_uses_extracted_text(self):
        generator = FakeGenerator(resume_reply())

        analysis = run_resume_analysis(
            _profile(resume_url="https://files.example.com/cv.pdf"), generator,
            extract=lambda uri: "Built billing systems at Acme",
        )

        assert analysis.skills_review.strong[0].skill == "Python"
        assert analysis.analyzed_at is not None
        assert "Built billing systems at Acme" in generator.prompts[0]

    def test_unreachable_resume_degrades_instead_of_failing(self):
        generator = FakeGenerator(resume_reply())

        analysis = run_resume_analysis(
            _profile(resume_url="https://files.example.com/missing.pdf"), generator, extract=_unreachable,
        )

        assert isinstance(analysis, ResumeAnalysis)
        assert EXTRACTION_FAILED_TEXT in generator.prompts[0]
        assert "Python" in generator.prompts[0]

    def test_no_resume_skips_extraction(self):
        generator = FakeGenerator(resume_reply())

        def extract(uri):
            raise AssertionError("should not be called")

        run_resume_analysis(_profile(), generator, extract=extract)
        assert "No resume text provided" in generator.prompts[0]

    def test_unparseable_reply_is_an_analysis_error(self):
        generator = FakeGenerator("Here is your analysis: great resume!")

        with pytest.raises(AnalysisError) as exc_info:
            run_resume_analysis(_profile(), generator)
        assert exc_info.value.kind == "parse"

    def test_model_timeout_is_an_analysis_error(self):
        generator = FakeGenerator(ModelInvocationError("request timed out", timeout=True))

        with pytest.raises(AnalysisError) as exc_info:
            run_resume_analysis(_profile(), generator)
        assert exc_info.value.kind == "timeout"
        assert exc_info.value.status_code == 504


class TestGapAnalysis:

    @pytest.mark.parametrize("percentage, expected", [(0, True), (59, True), (60, False), (100, False)])
    def test_significant_gap_threshold(self, percentage, expected):
        outcome = run_gap_analysis(_profile(), JOB, FakeGenerator(gap_reply(matchPercentage=percentage)))

        assert outcome.analysis.match_percentage == percentage
        assert outcome.has_significant_gap is expected

    def test_threshold_is_configurable(self):
        assert has_significant_gap(70, threshold=75) is True
        assert has_significant_gap(75, threshold=75) is False

    def test_prior_resume_analysis_is_used_as_evidence(self):
        generator = FakeGenerator(gap_reply())
        prior = ResumeAnalysis.model_validate(RESUME_ANALYSIS)

        run_gap_analysis(_profile(), JOB, generator, resume_analysis=prior)

        assert "Strong Skills: Python" in generator.prompts[0]

    def test_model_failure_is_an_analysis_error(self):
        generator = FakeGenerator(ModelInvocationError("rate limited"))

        with pytest.raises(AnalysisError) as exc_info:
            run_gap_analysis(_profile(), JOB, generator)
        assert exc_info.value.kind == "model"
        assert "rate limited" in exc_info.value.message


class TestTargetJobLifecycle:

    def _user(self, db):
        return create_user(db, auth_id="user_1", email="user_1@example.com")

    def test_pending_then_failed_then_completed(self, db):
        user = self._user(db)
        created = upsert_target_job(db, user.id, "42", base={"title": JOB.title, "description": JOB.description})
        assert created.analysis_status == PENDING

        with pytest.raises(AnalysisError):
            analyze_target_job(db, user, "42", JOB, FakeGenerator("not json"))
        db.refresh(created)
        assert created.analysis_status == FAILED
        assert created.match_percentage is None

        record, outcome = analyze_target_job(db, user, "42", JOB, FakeGenerator(gap_reply(matchPercentage=55)))

        assert record.id == created.id
        assert record.analysis_status == COMPLETED
        assert outcome.has_significant_gap is True
        for field in ("match_percentage", "match_summary", "strengths", "critical_gaps",
                      "proficiency_gaps", "recommended_actions", "timeline_assessment"):
            assert getattr(record, field) is not None
        assert record.analyzed_at is not None

    def test_failure_keeps_previous_analysis_fields(self, db):
        user = self._user(db)
        base = {"title": JOB.title, "description": JOB.description}
        analyze_target_job(db, user, "42", JOB, FakeGenerator(gap_reply(matchPercentage=80)), base=base)

        with pytest.raises(AnalysisError):
            analyze_target_job(db, user, "42", JOB, FakeGenerator(ModelInvocationError("down")))

        record = db.query(TargetJob).filter(TargetJob.job_key == "42").one()
        assert record.analysis_status == FAILED
        assert record.match_percentage == 80

    def test_rerun_overwrites_and_never_duplicates(self, db):
        user = self._user(db)
        base = {"title": JOB.title, "description": JOB.description}

        analyze_target_job(db, user, "42", JOB, FakeGenerator(gap_reply(matchPercentage=30)), base=base)
        record, _ = analyze_target_job(db, user, "42", JOB, FakeGenerator(gap_reply(
            matchPercentage=90, strengths=[{"skill": "Go", "evidence": "e", "relevance": "r"}],
        )), base=base)

        assert record.match_percentage == 90
        assert record.strengths == [{"skill": "Go", "evidence": "e", "relevance": "r"}]
        assert db.query(TargetJob).filter(TargetJob.user_id == user.id).count() == 1

    def test_prior_resume_analysis_is_read_from_profile(self, db):
        user = self._user(db)
        update_fields(db, user, {"resume_analysis": RESUME_ANALYSIS})
        generator = FakeGenerator(gap_reply())

        analyze_target_job(db, user, "42", JOB, generator, base={"title": JOB.title, "description": JOB.description})

        assert "Weak Skills: Kubernetes" in generator.prompts[0]

    def test_unexpected_generator_error_still_marks_failed(self, db):
        user = self._user(db)
        base = {"title": JOB.title, "description": JOB.description}

        with pytest.raises(AnalysisError) as exc_info:
            analyze_target_job(db, user, "42", JOB, FakeGenerator(RuntimeError("socket closed")), base=base)

        assert exc_info.value.kind == "model"
        assert "socket closed" in exc_info.value.message
        record = db.query(TargetJob).filter(TargetJob.job_key == "42").one()
        assert record.analysis_status == FAILED


class TestCandidateProfile:

    def test_legacy_resume_analysis_is_ignored(self, db):
        user = create_user(db, auth_id="user_1", email="user_1@example.com")
        update_fields(db, user, {"resume_analysis": {"skills": ["Python"]}})

        assert CandidateProfile.from_user(user).resume_analysis is None

    def test_current_resume_analysis_is_loaded(self, db):
        user = create_user(db, auth_id="user_1", email="user_1@example.com")
        update_fields(db, user, {"resume_analysis": RESUME_ANALYSIS})

        prior = CandidateProfile.from_user(user).resume_analysis
        assert prior.overall_assessment.career_level == "Junior"
