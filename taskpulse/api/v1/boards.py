from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from taskpulse.api.deps import get_board_cache, get_board_ids, get_employee_directory, get_monday_client
from taskpulse.common.exceptions import ExternalServiceError, MondayAPIError
from taskpulse.core.boards.cache import BoardCache
from taskpulse.core.employees.directory import EmployeeDirectory
from taskpulse.core.metrics.schemas import Board, BoardSummary
from taskpulse.core.metrics.service import DashboardView, build_dashboard
from taskpulse.integrations.monday import MondayClient

router = APIRouter(tags=["Boards"])


# ---------- Schemas ----------


class BoardCatalogResponse(BaseModel):
    boards: list[BoardSummary]


class BoardDetailsResponse(BaseModel):
    boards: list[Board]


class GraphQLRequest(BaseModel):
    query: str
    variables: dict[str, Any] | None = None


# ---------- Endpoints ----------


@router.get("/boards", response_model=BoardCatalogResponse)
async def list_boards(client: MondayClient = Depends(get_monday_client)):
    try:
        boards = await client.get_boards()
    except MondayAPIError as e:
        raise ExternalServiceError("monday.com", e.message) from e
    return BoardCatalogResponse(boards=boards)


@router.get("/boards/details", response_model=BoardDetailsResponse)
async def board_details(
    board_ids: list[str] = Depends(get_board_ids),
    cache: BoardCache = Depends(get_board_cache),
):
    try:
        boards = await cache.get_boards(board_ids)
    except MondayAPIError as e:
        raise ExternalServiceError("monday.com", e.message) from e
    return BoardDetailsResponse(boards=boards)


@router.get("/dashboard", response_model=DashboardView)
async def dashboard(
    board_ids: list[str] = Depends(get_board_ids),
    cache: BoardCache = Depends(get_board_cache),
    directory: EmployeeDirectory = Depends(get_employee_directory),
):
    try:
        boards = await cache.get_boards(board_ids)
    except MondayAPIError as e:
        raise ExternalServiceError("monday.com", e.message) from e
    return build_dashboard(boards, directory.salary_table())


@router.post("/monday")
async def graphql_proxy(data: GraphQLRequest, client: MondayClient = Depends(get_monday_client)):
    """Forward a GraphQL document to monday.com unchanged."""
    try:
        return await client.execute(data.query, data.variables)
    except MondayAPIError as e:
        raise ExternalServiceError("monday.com", e.message) from e
