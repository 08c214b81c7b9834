from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from taskpulse.api.deps import get_broadcaster, get_monday_client
from taskpulse.common.exceptions import ExternalServiceError, MondayAPIError
from taskpulse.common.logging import get_logger
from taskpulse.config import settings
from taskpulse.core.live.broadcaster import Broadcaster
from taskpulse.core.live.ingestion import ingest_webhook
from taskpulse.core.live.schemas import ChallengeResponse, WebhookAck
from taskpulse.core.live.sse import SSE_HEADERS, event_stream
from taskpulse.integrations.monday import MondayClient

logger = get_logger("api.v1.webhooks")

router = APIRouter(tags=["Live updates"])


# ---------- Schemas ----------


class WebhookSetupRequest(BaseModel):
    board_id: str = Field(alias="boardId", min_length=1)
    webhook_url: str | None = Field(None, alias="webhookUrl", min_length=1)


class WebhookSetupResponse(BaseModel):
    success: bool
    webhooks: list[dict]
    message: str


class WebhookListResponse(BaseModel):
    webhooks: list[dict]


def default_webhook_url() -> str:
    return f"{settings.APP_URL.rstrip('/')}/api/v1/webhooks"


# ---------- Endpoints ----------


@router.post("/webhooks", response_model=ChallengeResponse | WebhookAck)
async def receive_webhook(request: Request, broadcaster: Broadcaster = Depends(get_broadcaster)):
    body = await request.body()
    return await ingest_webhook(body, broadcaster)


@router.get("/stream")
async def stream(request: Request, broadcaster: Broadcaster = Depends(get_broadcaster)):
    channel = await broadcaster.subscribe()
    return StreamingResponse(
        event_stream(
            channel,
            broadcaster,
            heartbeat_seconds=settings.STREAM_HEARTBEAT_SECONDS,
            is_disconnected=request.is_disconnected,
        ),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/webhooks/setup", response_model=WebhookSetupResponse)
async def setup_webhooks(
    data: WebhookSetupRequest,
    client: MondayClient = Depends(get_monday_client),
):
    webhook_url = data.webhook_url or default_webhook_url()
    webhooks = await client.create_board_webhooks(data.board_id, webhook_url)
    return WebhookSetupResponse(
        success=True,
        webhooks=webhooks,
        message=f"Created {len(webhooks)} webhooks for board {data.board_id}",
    )


@router.get("/webhooks/setup", response_model=WebhookListResponse)
async def list_webhooks(
    board_id: str = Query(..., min_length=1),
    client: MondayClient = Depends(get_monday_client),
):
    try:
        webhooks = await client.list_webhooks(board_id)
    except MondayAPIError as e:
        raise ExternalServiceError("monday.com", e.message) from e
    return WebhookListResponse(webhooks=webhooks)
