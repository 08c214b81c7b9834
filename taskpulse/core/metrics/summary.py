from collections.abc import Sequence

from taskpulse.common.enums import StatusBucket
from taskpulse.core.metrics.columns import ColumnField, column_text
from taskpulse.core.metrics.parsing import classify_status, counts_toward_active_workload
from taskpulse.core.metrics.schemas import Board, TaskSummary

OTHER_LABEL = "Other"

# Lowercased status text -> display label shown in the status breakdown
SUMMARY_LABELS: dict[str, str] = {
    "done": "Done",
    "completed": "Done",
    "in progress": "In Progress",
    "working on it": "In Progress",
    "waiting for materials": "Waiting For Materials",
    "ready for client": "Ready For Client",
    "to do": "To Do",
    "need review": "Need Review",
    "needs review": "Need Review",
    "lead feedback": "Lead Feedback",
    "to pack": "To Pack",
    "sent": "Sent",
    "client feedback": "Client Feedback",
    "paused": "Paused",
    "stopped": "Stopped",
    "stuck": "Stuck",
    "not started": "Not Started",
}


def summary_label(status_text: str) -> str:
    return SUMMARY_LABELS.get(status_text.strip().lower(), OTHER_LABEL)


def compute_task_summary(boards: Sequence[Board]) -> TaskSummary:
    """Aggregate leaf tasks across boards.

    A parent item with subitems is represented by its subitems only, so a
    task and its breakdown are never counted twice. Tasks with no status set
    are left out of every count.
    """
    summary = TaskSummary(total_boards=len(boards))
    status_counts: dict[str, int] = {}

    for board in boards:
        for item in board.items:
            for task in item.leaves():
                status_text = column_text(task, ColumnField.STATUS)
                bucket = classify_status(status_text)
                if bucket is StatusBucket.NONE:
                    continue

                summary.total_tasks += 1
                label = summary_label(status_text)
                status_counts[label] = status_counts.get(label, 0) + 1

                if bucket is StatusBucket.DONE:
                    summary.completed_tasks += 1
                elif bucket is StatusBucket.IN_PROGRESS:
                    summary.in_progress_tasks += 1
                if counts_toward_active_workload(bucket):
                    summary.active_workload += 1

    summary.status_counts = status_counts
    if summary.total_tasks > 0:
        summary.completion_rate = summary.completed_tasks / summary.total_tasks * 100
    return summary
