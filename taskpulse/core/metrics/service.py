from collections.abc import Mapping, Sequence

from taskpulse.core.metrics.payments import compute_payments, payment_employee_names
from taskpulse.core.metrics.schemas import Board, CamelModel, EmployeeStat, PaymentRecord, TaskSummary
from taskpulse.core.metrics.summary import compute_task_summary
from taskpulse.core.metrics.workload import compute_workload_by_employee


class DashboardView(CamelModel):
    board_ids: list[str]
    workload: list[EmployeeStat]
    summary: TaskSummary
    payments: list[PaymentRecord]
    payment_employees: list[str]


def build_dashboard(boards: Sequence[Board], salary_table: Mapping[str, float]) -> DashboardView:
    """Run every derivation over the same board snapshot."""
    return DashboardView(
        board_ids=[b.id for b in boards],
        workload=compute_workload_by_employee(boards),
        summary=compute_task_summary(boards),
        payments=compute_payments(boards, salary_table),
        payment_employees=payment_employee_names(boards),
    )
