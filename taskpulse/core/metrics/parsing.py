"""Parsing of monday.com column text: tracked time and status labels.

Both parsers are total: they never raise, and malformed input degrades to
``0.0`` hours or to the ``NONE`` / ``OTHER`` status buckets.
"""

from __future__ import annotations

import math
import re

from taskpulse.common.enums import StatusBucket

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# Ordered label table. Matching is case-insensitive on the trimmed text.
STATUS_TABLE: tuple[tuple[tuple[str, ...], StatusBucket], ...] = (
    (("in progress", "working on it"), StatusBucket.IN_PROGRESS),
    (("need review", "needs review"), StatusBucket.NEED_REVIEW),
    (("lead feedback",), StatusBucket.LEAD_FEEDBACK),
    (("to pack",), StatusBucket.TO_PACK),
    (("sent",), StatusBucket.SENT),
    (("client feedback",), StatusBucket.CLIENT_FEEDBACK),
    (("ready for client",), StatusBucket.READY),
    (("paused", "waiting for materials"), StatusBucket.PAUSED),
    (("done", "completed"), StatusBucket.DONE),
    (("stopped",), StatusBucket.STOPPED),
    (("none", ""), StatusBucket.NONE),
)

_STATUS_LOOKUP: dict[str, StatusBucket] = {
    label: bucket for labels, bucket in STATUS_TABLE for label in labels
}

# Broad definition used by the employee table. OTHER is included:
# unrecognised statuses count as work in progress.
EMPLOYEE_WORKLOAD_BUCKETS: frozenset[StatusBucket] = frozenset({
    StatusBucket.IN_PROGRESS,
    StatusBucket.NEED_REVIEW,
    StatusBucket.LEAD_FEEDBACK,
    StatusBucket.TO_PACK,
    StatusBucket.CLIENT_FEEDBACK,
    StatusBucket.OTHER,
})

# Narrow definition used by the task summary.
ACTIVE_WORKLOAD_BUCKETS: frozenset[StatusBucket] = frozenset({
    StatusBucket.IN_PROGRESS,
    StatusBucket.NEED_REVIEW,
})


def _segment_to_int(segment: str) -> int:
    match = _LEADING_INT.match(segment)
    return int(match.group(1)) if match else 0


def parse_duration(text: str | None) -> float:
    """Convert a ``H:MM:SS`` time-tracking string to fractional hours.

    Hours are unbounded (``"25:00:00"`` is 25.0). Text without a colon is
    read as a plain number of hours. Anything else yields ``0.0``.
    """
    if not text:
        return 0.0

    if ":" in text:
        parts = text.split(":")
        if len(parts) != 3:
            return 0.0
        hours, minutes, seconds = (_segment_to_int(p) for p in parts)
        return hours + minutes / 60 + seconds / 3600

    try:
        value = float(text.strip())
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def classify_status(text: str | None) -> StatusBucket:
    """Map a free-text status label onto exactly one bucket."""
    key = (text or "").strip().lower()
    return _STATUS_LOOKUP.get(key, StatusBucket.OTHER)


def counts_toward_workload(bucket: StatusBucket) -> bool:
    return bucket in EMPLOYEE_WORKLOAD_BUCKETS


def counts_toward_active_workload(bucket: StatusBucket) -> bool:
    return bucket in ACTIVE_WORKLOAD_BUCKETS
