"""Tests for the coach briefing."""
from datetime import date

import pytest

from jobflow.analytics import coach_stats
from jobflow.context import STRATEGIC_DIRECTIVES, assemble_briefing
from jobflow.models import Job, Resume, Section


def _briefing(jobs, resume=None):
    return assemble_briefing(jobs, resume or Resume(), coach_stats(jobs))


def _jobs(n, **kw):
    return [Job(company=f"Co{i}", role=f"Role{i}", date_applied=date(2024, 1, 1), **kw) for i in range(n)]


def test_empty_data_keeps_every_section():
    text = _briefing([])
    assert "- Name: User" in text
    assert "- Current Role: Not listed" in text
    assert "- Education: Not listed" in text
    assert "- Top Skills: Not provided" in text
    assert "- Summary: Not provided" in text
    assert "- Total Applications: 0" in text
    assert "- Conversion Rate: 0%" in text
    assert "No recent applications" in text
    assert "None scheduled" in text


@pytest.mark.parametrize("n", [0, 3, 12])
def test_directives_always_present_verbatim(n):
    text = _briefing(_jobs(n))
    for directive in STRATEGIC_DIRECTIVES:
        assert directive in text


def test_identity_uses_first_sections():
    resume = Resume(
        full_name="Ada Lovelace",
        skills="Python, SQL",
        summary="Analyst",
        experience=[Section(title="Engineer @ Acme", date="2020-now"), Section(title="Intern", date="2019")],
        education=[Section(title="BSc Maths", date="2018")],
    )
    text = _briefing([], resume)
    assert "- Name: Ada Lovelace" in text
    assert "- Current Role: Engineer @ Acme (2020-now)" in text
    assert "- Education: BSc Maths (2018)" in text
    assert "- Top Skills: Python, SQL" in text
    assert "Intern" not in text


def test_recent_activity_limited_to_five_newest():
    jobs = _jobs(7)
    text = _briefing(jobs)
    assert "- Role0 at Co0 (Applied)" in text
    assert "- Role4 at Co4 (Applied)" in text
    assert "Role5 at Co5" not in text


def test_upcoming_interviews_and_conversion():
    jobs = _jobs(11) + [Job(company="Globex", role="SRE", status="Interview", date_applied=date(2024, 1, 1))]
    text = _briefing(jobs)
    assert "- SRE at Globex\n" in text
    assert "- Conversion Rate: 8.3%" in text
    assert "None scheduled" not in text


def test_section_order():
    text = _briefing(_jobs(1))
    order = ["User Identity:", "Job Search Stats:", "Recent Activity", "Upcoming Interviews:", "Strategic Logic:"]
    positions = [text.index(h) for h in order]
    assert positions == sorted(positions)
