"""Overtime payment calculation.

Time is logged against subitems, so only subitems contribute. Parent items
are ignored here even when they carry time or person columns.
"""

import math
from collections.abc import Iterable, Iterator, Mapping

from taskpulse.common.logging import get_logger
from taskpulse.core.metrics.columns import ColumnField, column_text
from taskpulse.core.metrics.parsing import parse_duration
from taskpulse.core.metrics.schemas import Board, Item, PaymentRecord

logger = get_logger("metrics.payments")

STANDARD_WORKING_HOURS = 160  # monthly baseline

UNKNOWN_EMPLOYEE = "Unknown"

# Legacy monthly salaries. Boards mix Latin and Cyrillic spellings of the
# same people, so both are listed.
DEFAULT_SALARIES: dict[str, float] = {
    "Kateryna Mokhova": 500,
    "Ira Skoryk": 1000,
    "Anastasia Domina": 1500,
    "Мохова": 500,
    "Скорик": 1000,
    "Дьоміна": 1500,
}


def _parse_rate(text: str) -> float:
    try:
        rate = float(text)
    except ValueError:
        return 0.0
    return rate if math.isfinite(rate) else 0.0


def iter_subitems(boards: Iterable[Board]) -> Iterator[Item]:
    for board in boards:
        for item in board.items:
            if item.subitems:
                yield from item.subitems


def resolve_salary(name: str, salary_table: Mapping[str, float]) -> float:
    return salary_table.get(name) or DEFAULT_SALARIES.get(name) or 0.0


def overtime_payment(hours_spent: float, rate: float) -> float:
    if hours_spent <= STANDARD_WORKING_HOURS:
        return 0.0
    return (hours_spent - STANDARD_WORKING_HOURS) * rate


def compute_payments(
    boards: Iterable[Board], salary_table: Mapping[str, float] | None = None,
) -> list[PaymentRecord]:
    salary_table = salary_table or {}
    records: dict[str, PaymentRecord] = {}

    for subitem in iter_subitems(boards):
        name = column_text(subitem, ColumnField.PAYMENT_PERSON) or UNKNOWN_EMPLOYEE
        hours = parse_duration(column_text(subitem, ColumnField.PAYMENT_TIME))
        explicit_rate = _parse_rate(column_text(subitem, ColumnField.PAYMENT_RATE))

        record = records.get(name)
        if record is None:
            salary = resolve_salary(name, salary_table)
            record = records[name] = PaymentRecord(
                employee=name,
                salary=salary,
                rate=salary / STANDARD_WORKING_HOURS,
            )

        record.hours_spent += hours
        if explicit_rate > 0:
            record.rate = explicit_rate

    for record in records.values():
        record.additional_payment = overtime_payment(record.hours_spent, record.rate)
        record.expected_earnings = record.hours_spent * record.rate

    logger.debug("Computed payments for %d employees", len(records))
    return list(records.values())


def payment_employee_names(boards: Iterable[Board]) -> list[str]:
    """Distinct employee names found on subitems, for salary editing."""
    names = {
        column_text(subitem, ColumnField.PAYMENT_PERSON)
        for subitem in iter_subitems(boards)
    }
    names.discard("")
    names.discard(UNKNOWN_EMPLOYEE)
    return sorted(names)
