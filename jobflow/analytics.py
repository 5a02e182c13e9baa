"""Search-progress numbers derived from the job list.

Everything here is a pure function of ``(jobs, today)``; nothing is cached.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from jobflow.models import Job

WINDOW_DAYS = 30
SERIES_DAYS = 30


@dataclass(frozen=True)
class Metric:
    value: int
    trend: str | None = None  # "up" | "down" | "neutral"


@dataclass(frozen=True)
class DashboardStats:
    applied: Metric
    interviews: Metric
    offers: Metric
    rejected: Metric
    accepted: Metric
    recent_count: int
    prev_applied: int
    prev_interviews: int
    prev_offers: int


@dataclass(frozen=True)
class DailyPoint:
    label: str  # e.g. "Oct 5"
    day: date
    count: int


@dataclass(frozen=True)
class CoachStats:
    total_applications: int
    interviews: int
    offers: int
    conversion_rate: str


# ── Predicates ───────────────────────────────────────────────────────────


def is_application(job: Job) -> bool:
    return job.origin == "application"


def is_interview(job: Job) -> bool:
    return job.status == "Interview"


def is_offer(job: Job) -> bool:
    return job.status == "Offer" or job.origin == "offer"


def _count(jobs: Iterable[Job], pred) -> int:
    return sum(1 for j in jobs if pred(j))


# ── Windows ──────────────────────────────────────────────────────────────


def recent_jobs(jobs: list[Job], today: date | None = None) -> list[Job]:
    """Jobs dated within the last 30 days, today included."""
    today = today or date.today()
    start = today - timedelta(days=WINDOW_DAYS)
    return [j for j in jobs if start <= j.date_applied <= today]


def previous_jobs(jobs: list[Job], today: date | None = None) -> list[Job]:
    """Jobs dated 60 to 30 days ago (60 inclusive, 30 exclusive)."""
    today = today or date.today()
    start = today - timedelta(days=2 * WINDOW_DAYS)
    end = today - timedelta(days=WINDOW_DAYS)
    return [j for j in jobs if start <= j.date_applied < end]


def trend(current: int, previous: int) -> str:
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "neutral"


# ── Public API ───────────────────────────────────────────────────────────


def dashboard_stats(jobs: list[Job], today: date | None = None) -> DashboardStats:
    """Headline counts with 30-day trends.

    Note the applied trend compares the size of the recent window against
    applications in the previous window, while the displayed value is the
    all-time application count. Interviews and offers compare all-time totals
    against the previous window.
    """
    today = today or date.today()
    recent = recent_jobs(jobs, today)
    previous = previous_jobs(jobs, today)

    applied = _count(jobs, is_application)
    interviews = _count(jobs, is_interview)
    offers = _count(jobs, is_offer)

    prev_applied = _count(previous, is_application)
    prev_interviews = _count(previous, is_interview)
    prev_offers = _count(previous, is_offer)

    return DashboardStats(
        applied=Metric(applied, trend(len(recent), prev_applied)),
        interviews=Metric(interviews, trend(interviews, prev_interviews)),
        offers=Metric(offers, trend(offers, prev_offers)),
        rejected=Metric(_count(jobs, lambda j: j.status == "Rejected")),
        accepted=Metric(_count(jobs, lambda j: j.status == "Accepted")),
        recent_count=len(recent),
        prev_applied=prev_applied,
        prev_interviews=prev_interviews,
        prev_offers=prev_offers,
    )


def daily_series(jobs: list[Job], today: date | None = None, days: int = SERIES_DAYS) -> list[DailyPoint]:
    """Applications per calendar day, oldest first, ending today."""
    today = today or date.today()
    per_day: dict[date, int] = {}
    for job in jobs:
        per_day[job.date_applied] = per_day.get(job.date_applied, 0) + 1

    points: list[DailyPoint] = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        points.append(DailyPoint(label=f"{day:%b} {day.day}", day=day, count=per_day.get(day, 0)))
    return points


def conversion_rate(interviews: int, offers: int, total: int) -> str:
    """Percentage with one decimal, or "0" when there is nothing to divide by."""
    if total <= 0:
        return "0"
    return f"{(interviews + offers) / total * 100:.1f}"


def coach_stats(jobs: list[Job]) -> CoachStats:
    """Counts quoted to the career coach: every job counts as an application."""
    total = len(jobs)
    interviews = _count(jobs, is_interview)
    offers = _count(jobs, lambda j: j.status == "Offer")
    return CoachStats(
        total_applications=total,
        interviews=interviews,
        offers=offers,
        conversion_rate=conversion_rate(interviews, offers, total),
    )
