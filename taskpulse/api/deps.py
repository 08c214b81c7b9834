from fastapi import Query, Request

from taskpulse.common.exceptions import BadRequestError
from taskpulse.core.boards.cache import BoardCache
from taskpulse.core.employees.directory import EmployeeDirectory
from taskpulse.core.live.broadcaster import Broadcaster
from taskpulse.integrations.monday import MondayClient


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def get_board_cache(request: Request) -> BoardCache:
    return request.app.state.board_cache


def get_employee_directory(request: Request) -> EmployeeDirectory:
    return request.app.state.employees


def get_monday_client() -> MondayClient:
    return MondayClient()


def get_board_ids(
    board_ids: str = Query(..., description="Comma-separated monday.com board ids"),
) -> list[str]:
    ids = [b.strip() for b in board_ids.split(",") if b.strip()]
    if not ids:
        raise BadRequestError("At least one board id is required")
    if not all(b.isdigit() for b in ids):
        raise BadRequestError("Board ids must be numeric")
    return ids
