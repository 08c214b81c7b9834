from collections.abc import Iterable, Iterator

from taskpulse.common.enums import StatusBucket
from taskpulse.common.logging import get_logger
from taskpulse.core.metrics.columns import ColumnField, column_text
from taskpulse.core.metrics.parsing import classify_status, counts_toward_workload, parse_duration
from taskpulse.core.metrics.schemas import Board, EmployeeStat, Item

logger = get_logger("metrics.workload")

UNASSIGNED = "Unassigned"

# Bucket -> EmployeeStat counter incremented for it
BUCKET_COUNTERS: dict[StatusBucket, str] = {
    StatusBucket.IN_PROGRESS: "in_progress",
    StatusBucket.NEED_REVIEW: "need_review",
    StatusBucket.LEAD_FEEDBACK: "lead_feedback",
    StatusBucket.TO_PACK: "to_pack",
    StatusBucket.SENT: "sent",
    StatusBucket.CLIENT_FEEDBACK: "client_feedback",
    StatusBucket.READY: "ready_for_client",
    StatusBucket.PAUSED: "paused",
    StatusBucket.STOPPED: "stopped",
    StatusBucket.DONE: "completed",
}


def iter_work_units(boards: Iterable[Board]) -> Iterator[Item]:
    """Yield every item and every subitem as an independent unit of work."""
    for board in boards:
        for item in board.items:
            yield item
            if item.subitems:
                yield from item.subitems


def compute_workload_by_employee(boards: Iterable[Board]) -> list[EmployeeStat]:
    employees: dict[str, EmployeeStat] = {}

    for unit in iter_work_units(boards):
        name = column_text(unit, ColumnField.WORKLOAD_PERSON) or UNASSIGNED
        stat = employees.get(name)
        if stat is None:
            stat = employees[name] = EmployeeStat(name=name)

        stat.total_items += 1

        bucket = classify_status(column_text(unit, ColumnField.STATUS))
        counter = BUCKET_COUNTERS.get(bucket)
        if counter:
            setattr(stat, counter, getattr(stat, counter) + 1)
        if counts_toward_workload(bucket):
            stat.workload += 1

        stat.time_spent += parse_duration(column_text(unit, ColumnField.WORKLOAD_TIME))

    # sorted() is stable, so equal workloads keep encounter order
    result = sorted(employees.values(), key=lambda s: s.workload, reverse=True)
    logger.debug("Computed workload for %d employees", len(result))
    return result
