import json
from collections.abc import AsyncGenerator, Sequence

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from taskpulse.core.boards.cache import BoardCache
from taskpulse.core.metrics.schemas import Board
from taskpulse.integrations.monday import MondayClient
from taskpulse.tests.factories import make_board, make_item


@pytest.fixture
def sample_boards() -> list[Board]:
    return [
        make_board(
            make_item(
                "Brand book",
                person="Ira Skoryk",
                status="In Progress",
                subitems=[
                    make_item("Logo", person="Ira Skoryk", status="Done", time="100:00:00"),
                    make_item("Palette", person="Ira Skoryk", status="Need Review", time="70:30:00"),
                ],
            ),
            make_item("Landing page", person="Kateryna Mokhova", status="Working on it"),
            board_id="111",
            name="Design",
        ),
        make_board(
            make_item("Backlog idea", status=""),
            board_id="222",
            name="Ideas",
        ),
    ]


@pytest.fixture
def fetched() -> list[list[str]]:
    """Board id lists requested from the fake fetcher, in call order."""
    return []


@pytest.fixture
def board_fetcher(sample_boards, fetched):
    async def fetch(board_ids: Sequence[str]) -> list[Board]:
        fetched.append(list(board_ids))
        return [b for b in sample_boards if b.id in board_ids]

    return fetch


@pytest.fixture
def monday_responses() -> dict:
    """GraphQL ``data`` payloads returned by the mock monday.com transport."""
    return {}


@pytest.fixture
def monday_requests() -> list[dict]:
    """JSON bodies sent to the mock monday.com transport, in call order."""
    return []


@pytest.fixture
def monday_client(monday_responses, monday_requests) -> MondayClient:
    def handler(request: httpx.Request) -> httpx.Response:
        monday_requests.append(json.loads(request.content))
        return httpx.Response(200, json={"data": monday_responses})

    return MondayClient(token="test-token", api_url="https://monday.test/v2", transport=httpx.MockTransport(handler))


@pytest.fixture
async def app(board_fetcher, monday_client):
    from taskpulse.api.deps import get_monday_client
    from taskpulse.main import app

    async with app.router.lifespan_context(app):
        app.state.board_cache = BoardCache(board_fetcher, ttl_seconds=60)
        await app.state.broadcaster.subscribe(app.state.board_cache.handle_event)
        app.dependency_overrides[get_monday_client] = lambda: monday_client
        yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
