from pydantic import BaseModel, Field

from taskpulse.core.metrics.payments import DEFAULT_SALARIES

DEFAULT_DEPARTMENT = "Unknown"

DEFAULT_DEPARTMENTS: dict[str, str] = {
    "Kateryna Mokhova": "Design",
    "Ira Skoryk": "Development",
    "Anastasia Domina": "Management",
    "Мохова": "Design",
    "Скорик": "Development",
    "Дьоміна": "Management",
}


class Employee(BaseModel):
    name: str = Field(min_length=1)
    salary: float = Field(ge=0)
    department: str | None = None


class EmployeeDirectory:
    """In-memory salary directory keyed by employee display name."""

    def __init__(self, employees: list[Employee] | None = None):
        self._employees: dict[str, Employee] = {}
        for employee in employees if employees is not None else self.defaults():
            self._employees[employee.name] = employee

    @staticmethod
    def defaults() -> list[Employee]:
        return [
            Employee(name=name, salary=salary, department=DEFAULT_DEPARTMENTS.get(name, DEFAULT_DEPARTMENT))
            for name, salary in DEFAULT_SALARIES.items()
        ]

    def all(self) -> list[Employee]:
        return list(self._employees.values())

    def get(self, name: str) -> Employee | None:
        return self._employees.get(name)

    def upsert(self, employee: Employee) -> Employee:
        existing = self._employees.get(employee.name)
        department = employee.department or (existing.department if existing else None) or DEFAULT_DEPARTMENT
        saved = employee.model_copy(update={"department": department})
        self._employees[saved.name] = saved
        return saved

    def remove(self, name: str) -> bool:
        return self._employees.pop(name, None) is not None

    def salary_table(self) -> dict[str, float]:
        return {e.name: e.salary for e in self._employees.values()}
