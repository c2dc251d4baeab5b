"""Display progress for auto-apply runs.

The automation worker only reports pending/submitted/failed, so while a run is
pending the progress shown to the user is a fixed step function of the time
elapsed since the run started. It is a display heuristic and says nothing
about how much work the worker has actually done.
"""

import math
from datetime import datetime, timezone
from typing import Optional, Tuple

from resumeboost.records import ApplicationLog, StatusProjection

# Window in which the pending buckets apply.
PENDING_WINDOW_SECONDS = 120

# (elapsed upper bound in seconds, exclusive) -> projection while pending.
PROGRESS_BUCKETS: Tuple[Tuple[int, StatusProjection], ...] = (
    (10, StatusProjection("processing", 10, "Analyzing application form...", 110)),
    (30, StatusProjection("processing", 30, "Filling personal details...", 90)),
    (60, StatusProjection("processing", 60, "Uploading resume...", 60)),
    (90, StatusProjection("processing", 80, "Submitting application...", 30)),
    (PENDING_WINDOW_SECONDS, StatusProjection("processing", 95, "Capturing confirmation...", 5)),
)

COMPLETED = StatusProjection("completed", 100, "Application submitted successfully", 0)
FAILED = StatusProjection("failed", 0, "Application failed", 0)
FINALIZING = StatusProjection("processing", 95, "Finalizing submission...", 5)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_seconds(started_at: datetime, now: datetime) -> int:
    """Whole seconds between two timestamps, naive values read as UTC."""
    return math.floor((_as_utc(now) - _as_utc(started_at)).total_seconds())


def project(log: ApplicationLog, now: Optional[datetime] = None) -> StatusProjection:
    """Derive the status/progress/step/ETA tuple shown for ``log`` at ``now``."""
    if log.status == "submitted":
        return COMPLETED
    if log.status == "failed":
        return FAILED
    if log.status != "pending":
        return FINALIZING

    now = now or datetime.now(timezone.utc)
    elapsed = elapsed_seconds(log.application_date, now)
    for upper_bound, projection in PROGRESS_BUCKETS:
        if elapsed < upper_bound:
            return projection
    return FINALIZING
