from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ColumnValue(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    text: str | None = None
    value: str | None = None


class Item(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str = ""
    column_values: list[ColumnValue] = []
    subitems: list["Item"] | None = None

    @field_validator("column_values")
    @classmethod
    def _unique_column_ids(cls, values: list[ColumnValue]) -> list[ColumnValue]:
        seen: set[str] = set()
        for column in values:
            if column.id in seen:
                raise ValueError(f"duplicate column id '{column.id}'")
            seen.add(column.id)
        return values

    @field_validator("subitems")
    @classmethod
    def _single_level(cls, subitems: list["Item"] | None) -> list["Item"] | None:
        if subitems and any(sub.subitems for sub in subitems):
            raise ValueError("subitems cannot contain nested subitems")
        return subitems

    def leaves(self) -> list["Item"]:
        """Subitems when present, otherwise the item itself."""
        return list(self.subitems) if self.subitems else [self]


class Board(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str = ""
    items: list[Item] = []


class BoardSummary(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    description: str | None = None
    items_count: int = 0


# ---------- Derived views ----------


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EmployeeStat(CamelModel):
    name: str
    total_items: int = 0
    in_progress: int = 0
    need_review: int = 0
    lead_feedback: int = 0
    to_pack: int = 0
    sent: int = 0
    client_feedback: int = 0
    ready_for_client: int = 0
    paused: int = 0
    stopped: int = 0
    completed: int = 0
    workload: int = 0
    time_spent: float = 0.0


class TaskSummary(CamelModel):
    total_tasks: int = 0
    total_boards: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    active_workload: int = 0
    completion_rate: float = 0.0
    status_counts: dict[str, int] = {}


class PaymentRecord(CamelModel):
    employee: str
    salary: float = 0.0
    hours_spent: float = 0.0
    rate: float = 0.0
    additional_payment: float = 0.0
    expected_earnings: float = 0.0
