from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from taskpulse.api.deps import get_employee_directory
from taskpulse.common.exceptions import NotFoundError
from taskpulse.core.employees.directory import Employee, EmployeeDirectory

router = APIRouter(prefix="/employees", tags=["Employees"])


# ---------- Schemas ----------


class EmployeeListResponse(BaseModel):
    success: bool = True
    employees: list[Employee]


class EmployeeResponse(BaseModel):
    success: bool = True
    message: str
    employee: Employee


class EmployeeBulkUpdate(BaseModel):
    employees: list[Employee]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ---------- Endpoints ----------


@router.get("", response_model=EmployeeListResponse)
async def list_employees(directory: EmployeeDirectory = Depends(get_employee_directory)):
    return EmployeeListResponse(employees=directory.all())


@router.post("", response_model=EmployeeResponse)
async def save_employee(data: Employee, directory: EmployeeDirectory = Depends(get_employee_directory)):
    saved = directory.upsert(data)
    return EmployeeResponse(message="Employee saved successfully", employee=saved)


@router.put("", response_model=EmployeeListResponse)
async def update_employees(data: EmployeeBulkUpdate, directory: EmployeeDirectory = Depends(get_employee_directory)):
    for employee in data.employees:
        directory.upsert(employee)
    return EmployeeListResponse(employees=directory.all())


@router.delete("", response_model=MessageResponse)
async def delete_employee(
    name: str = Query(..., min_length=1),
    directory: EmployeeDirectory = Depends(get_employee_directory),
):
    if not directory.remove(name):
        raise NotFoundError("Employee", name)
    return MessageResponse(message="Employee deleted successfully")
