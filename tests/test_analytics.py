"""Tests for dashboard stats, the daily series and coach statistics."""
from datetime import date, timedelta

from jobflow.analytics import (
    coach_stats,
    conversion_rate,
    daily_series,
    dashboard_stats,
    previous_jobs,
    recent_jobs,
    trend,
)
from jobflow.models import Job


def job(days_ago: int, today: date, **kw) -> Job:
    return Job(company=kw.pop("company", "Acme"), role=kw.pop("role", "Dev"),
               date_applied=today - timedelta(days=days_ago), **kw)


def test_trend():
    assert trend(5, 5) == "neutral"
    assert trend(6, 5) == "up"
    assert trend(4, 5) == "down"


def test_window_bounds(today):
    jobs = [job(d, today) for d in (0, 30, 31, 59, 60, 61, -1)]
    assert sorted((today - j.date_applied).days for j in recent_jobs(jobs, today)) == [0, 30]
    assert sorted((today - j.date_applied).days for j in previous_jobs(jobs, today)) == [31, 59, 60]


def test_counts_use_independent_status_and_origin(today):
    jobs = [
        job(1, today, status="Applied"),
        job(2, today, status="Interview"),
        job(3, today, status="Offer"),
        job(4, today, origin="offer", status="Accepted"),
        job(5, today, status="Rejected"),
        job(400, today, origin="offer", status="Rejected"),
    ]
    stats = dashboard_stats(jobs, today)
    assert stats.applied.value == 4
    assert stats.interviews.value == 1
    assert stats.offers.value == 3
    assert stats.rejected.value == 2
    assert stats.accepted.value == 1
    assert stats.rejected.trend is None


def test_applied_trend_uses_recent_window_count(today):
    # 5 recent jobs, one of them an offer, against 5 applications last window
    recent = [job(d, today) for d in range(4)] + [job(4, today, origin="offer")]
    previous = [job(40 + d, today) for d in range(5)]
    stats = dashboard_stats(recent + previous, today)
    assert stats.recent_count == 5
    assert stats.prev_applied == 5
    assert stats.applied.trend == "neutral"
    # displayed value is the all-time application count
    assert stats.applied.value == 9

    stats = dashboard_stats(recent + previous + [job(10, today)], today)
    assert stats.applied.trend == "up"


def test_interview_and_offer_trends_compare_totals_to_previous_window(today):
    jobs = [
        job(45, today, status="Interview"),
        job(50, today, status="Interview"),
        job(200, today, status="Interview"),
        job(46, today, status="Offer"),
    ]
    stats = dashboard_stats(jobs, today)
    assert stats.prev_interviews == 2
    assert stats.interviews.trend == "up"  # 3 all-time vs 2
    assert stats.offers.trend == "neutral"  # 1 vs 1
    assert dashboard_stats([], today).applied.trend == "neutral"


def test_daily_series_always_thirty_points(today):
    series = daily_series([], today)
    assert len(series) == 30
    assert all(p.count == 0 for p in series)
    assert series[0].day == today - timedelta(days=29)
    assert series[-1].day == today
    assert series[-1].label == "Jun 30"


def test_daily_series_exact_day_match(today):
    jobs = [job(29, today), job(0, today), job(0, today), job(30, today), job(-1, today)]
    series = daily_series(jobs, today)
    assert len(series) == 30
    assert series[0].count == 1
    assert series[-1].count == 2
    assert sum(p.count for p in series) == 3


def test_daily_series_label_has_no_leading_zero():
    series = daily_series([], date(2024, 3, 5))
    assert series[-1].label == "Mar 5"


def test_conversion_rate():
    assert conversion_rate(0, 0, 0) == "0"
    assert conversion_rate(1, 0, 12) == "8.3"
    assert conversion_rate(1, 1, 4) == "50.0"


def test_coach_stats(today):
    assert coach_stats([]).conversion_rate == "0"

    jobs = [job(i, today) for i in range(11)] + [job(1, today, status="Interview")]
    stats = coach_stats(jobs)
    assert stats.total_applications == 12
    assert stats.interviews == 1
    assert stats.offers == 0
    assert stats.conversion_rate == "8.3"
