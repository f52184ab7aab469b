from skillgap.prompts import (
    NO_RESUME_TEXT,
    build_gap_analysis_prompt,
    build_job_description_prompt,
    build_resume_prompt,
    smart_truncate,
)
from skillgap.schemas import CandidateProfile, JobDetails, ResumeAnalysis
from fakes import RESUME_ANALYSIS


def _profile(**kwargs):
    defaults = dict(
        auth_id="user_1",
        skills=["Python", "SQL", "Python"],
        experience_level="Intermediate",
        portfolio="https://me.dev",
        github_profile="https://github.com/me",
    )
    defaults.update(kwargs)
    return CandidateProfile(**defaults)


def _job():
    return JobDetails(
        title="Platform Engineer",
        description="Run our Kubernetes platform.",
        company="CloudOps Inc",
        requirements=["Kubernetes", "Terraform"],
        experience_level="Mid",
    )


class TestResumePrompt:

    def test_is_deterministic(self):
        assert build_resume_prompt(_profile(), "text") == build_resume_prompt(_profile(), "text")

    def test_embeds_profile_and_text(self):
        prompt = build_resume_prompt(_profile(), "Worked at Acme on billing")

        assert "Worked at Acme on billing" in prompt
        assert "Python, SQL, Python" in prompt
        assert "**Experience Level:** Intermediate" in prompt
        assert "https://me.dev" in prompt
        assert "https://github.com/me" in prompt
        assert '"projectsReview"' in prompt
        assert '"skillsDemonstrated"' in prompt

    def test_uses_sentinels_when_empty(self):
        prompt = build_resume_prompt(_profile(skills=[], portfolio=None, github_profile=None), "")

        assert NO_RESUME_TEXT in prompt
        assert "None specified" in prompt
        assert "**Portfolio:** Not provided" in prompt

    def test_long_text_is_truncated_head_and_tail(self):
        text = "A" * 20000 + "TAIL"
        truncated = smart_truncate(text, 1000)

        assert truncated.startswith("A" * 600)
        assert truncated.endswith("TAIL")
        assert "truncated for length" in truncated
        assert smart_truncate("short", 1000) == "short"


class TestGapPrompt:

    def test_is_deterministic(self):
        assert build_gap_analysis_prompt(_profile(), _job()) == build_gap_analysis_prompt(_profile(), _job())

    def test_embeds_job_and_candidate(self):
        prompt = build_gap_analysis_prompt(_profile(), _job())

        assert "Title: Platform Engineer" in prompt
        assert "Company: CloudOps Inc" in prompt
        assert "Experience Level: Mid" in prompt
        assert "Run our Kubernetes platform." in prompt
        assert "Kubernetes, Terraform" in prompt
        assert "Skills: Python, SQL, Python" in prompt
        assert '"matchPercentage": 0-100' in prompt

    def test_without_resume_analysis_says_not_analyzed(self):
        prompt = build_gap_analysis_prompt(_profile(), _job(), None)

        assert "Resume Analysis - Strong Skills: Not analyzed" in prompt
        assert "Resume Analysis - Weak Skills: Not analyzed" in prompt

    def test_with_resume_analysis_lists_strong_and_weak(self):
        prior = ResumeAnalysis.model_validate(RESUME_ANALYSIS)
        prompt = build_gap_analysis_prompt(_profile(), _job(), prior)

        assert "Resume Analysis - Strong Skills: Python" in prompt
        assert "Resume Analysis - Weak Skills: Kubernetes" in prompt

    def test_free_standing_job_fills_not_specified(self):
        job = JobDetails(title="Analyst", description="Numbers.")
        prompt = build_gap_analysis_prompt(_profile(), job)

        assert "Company: Not specified" in prompt
        assert "Requirements:\nNot specified" in prompt


def test_job_description_prompt_embeds_brief():
    prompt = build_job_description_prompt("  Senior Go developer, remote  ")
    assert "Senior Go developer, remote" in prompt
    assert '"requirements": ["string"]' in prompt
