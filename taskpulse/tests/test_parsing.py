import pytest

from taskpulse.common.enums import StatusBucket
from taskpulse.core.metrics.parsing import (
    classify_status,
    counts_toward_active_workload,
    counts_toward_workload,
    parse_duration,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("01:00:06", 1 + 6 / 3600),
        ("25:00:00", 25.0),
        ("02:30:00", 2.5),
        ("", 0.0),
        (None, 0.0),
        ("3.5", 3.5),
        ("abc", 0.0),
        ("1:30", 0.0),
        ("xx:30:00", 0.5),
        ("nan", 0.0),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == pytest.approx(expected)


def test_parse_duration_matches_documented_example():
    assert parse_duration("01:00:06") == pytest.approx(1.0017, abs=1e-4)


@pytest.mark.parametrize(
    ("text", "bucket"),
    [
        ("WORKING ON IT", StatusBucket.IN_PROGRESS),
        ("In Progress", StatusBucket.IN_PROGRESS),
        ("needs review", StatusBucket.NEED_REVIEW),
        ("Lead Feedback", StatusBucket.LEAD_FEEDBACK),
        ("To Pack", StatusBucket.TO_PACK),
        ("Sent", StatusBucket.SENT),
        ("Client Feedback", StatusBucket.CLIENT_FEEDBACK),
        ("Ready for client", StatusBucket.READY),
        ("Waiting for materials", StatusBucket.PAUSED),
        ("Completed", StatusBucket.DONE),
        ("  done  ", StatusBucket.DONE),
        ("Stopped", StatusBucket.STOPPED),
        ("none", StatusBucket.NONE),
        ("", StatusBucket.NONE),
        (None, StatusBucket.NONE),
        ("Something Else", StatusBucket.OTHER),
    ],
)
def test_classify_status(text, bucket):
    assert classify_status(text) is bucket


def test_classify_status_is_idempotent_on_labels():
    for bucket in StatusBucket:
        label = bucket.value.replace("_", " ")
        assert classify_status(label) is classify_status(label.upper())


def test_other_counts_as_employee_workload_but_not_active_workload():
    assert counts_toward_workload(StatusBucket.OTHER)
    assert not counts_toward_active_workload(StatusBucket.OTHER)


def test_workload_definitions_differ():
    for bucket in (StatusBucket.LEAD_FEEDBACK, StatusBucket.TO_PACK, StatusBucket.CLIENT_FEEDBACK):
        assert counts_toward_workload(bucket)
        assert not counts_toward_active_workload(bucket)
    for bucket in (StatusBucket.IN_PROGRESS, StatusBucket.NEED_REVIEW):
        assert counts_toward_workload(bucket)
        assert counts_toward_active_workload(bucket)
    for bucket in (StatusBucket.DONE, StatusBucket.STOPPED, StatusBucket.NONE, StatusBucket.SENT):
        assert not counts_toward_workload(bucket)
