from datetime import datetime, timedelta, timezone

import pytest

from resumeboost.records import ApplicationLog
from resumeboost.services.status_projector import elapsed_seconds, project

STARTED = datetime(2024, 5, 1, 12, 0, 0)


def make_log(status="pending", started=STARTED):
    return ApplicationLog(id="app-1", application_date=started, status=status, job_listing_id="job-1")


@pytest.mark.parametrize(
    "elapsed, progress, eta, step",
    [
        (0, 10, 110, "Analyzing application form..."),
        (9, 10, 110, "Analyzing application form..."),
        (10, 30, 90, "Filling personal details..."),
        (29, 30, 90, "Filling personal details..."),
        (30, 60, 60, "Uploading resume..."),
        (59, 60, 60, "Uploading resume..."),
        (60, 80, 30, "Submitting application..."),
        (89, 80, 30, "Submitting application..."),
        (90, 95, 5, "Capturing confirmation..."),
        (119, 95, 5, "Capturing confirmation..."),
    ],
)
def test_pending_runs_follow_elapsed_buckets(elapsed, progress, eta, step):
    projection = project(make_log(), now=STARTED + timedelta(seconds=elapsed))

    assert projection.status == "processing"
    assert projection.progress == progress
    assert projection.estimated_time_remaining == eta
    assert projection.current_step == step


def test_pending_beyond_window_is_finalizing():
    for elapsed in (120, 121, 3600):
        projection = project(make_log(), now=STARTED + timedelta(seconds=elapsed))
        assert projection.to_dict() == {
            "status": "processing",
            "progress": 95,
            "currentStep": "Finalizing submission...",
            "estimatedTimeRemaining": 5,
        }


def test_fractional_seconds_are_floored():
    projection = project(make_log(), now=STARTED + timedelta(seconds=9, milliseconds=999))
    assert projection.progress == 10


def test_submitted_is_complete_regardless_of_elapsed():
    for elapsed in (0, 45, 10_000):
        projection = project(make_log("submitted"), now=STARTED + timedelta(seconds=elapsed))
        assert projection.status == "completed"
        assert projection.progress == 100
        assert projection.estimated_time_remaining == 0


def test_failed_always_reports_zero_progress():
    projection = project(make_log("failed"), now=STARTED + timedelta(seconds=5))
    assert projection.status == "failed"
    assert projection.progress == 0


def test_unknown_status_falls_back_to_finalizing():
    projection = project(make_log("queued"), now=STARTED)
    assert projection.current_step == "Finalizing submission..."


def test_aware_and_naive_timestamps_compare_as_utc():
    now = datetime(2024, 5, 1, 14, 0, 45, tzinfo=timezone(timedelta(hours=2)))
    assert elapsed_seconds(STARTED, now) == 45
    assert project(make_log(), now=now).progress == 60
