import json
from typing import Any

from pydantic import ValidationError

from taskpulse.common.enums import LiveEventType
from taskpulse.common.logging import get_logger
from taskpulse.core.live.broadcaster import Broadcaster
from taskpulse.core.live.schemas import (
    ChallengeResponse,
    ProviderEvent,
    WebhookAck,
    WebhookEvent,
    WebhookPayload,
)

logger = get_logger("live.ingestion")


def parse_webhook_body(body: bytes) -> WebhookPayload:
    """Decode a webhook body, degrading anything malformed to an empty payload."""
    try:
        raw = json.loads(body) if body else {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Webhook body is not valid JSON, treating as empty event")
        return WebhookPayload()

    if not isinstance(raw, dict):
        logger.warning("Webhook body is not a JSON object, treating as empty event")
        return WebhookPayload()

    challenge = raw.get("challenge")
    event = raw.get("event")
    return WebhookPayload(
        challenge=challenge if challenge not in (None, "") else None,
        event=event if isinstance(event, dict) else None,
    )


def build_event(event: dict[str, Any] | None) -> WebhookEvent:
    """Wrap a provider event with a type tag and a fresh timestamp."""
    event = event or {}
    try:
        provider = ProviderEvent.model_validate(event)
    except ValidationError as e:
        logger.warning("Unexpected webhook event shape: %s", e.errors()[:1])
        provider = ProviderEvent()

    return WebhookEvent(
        type=LiveEventType.MONDAY_WEBHOOK.value,
        board_id=provider.board_id,
        item_id=provider.item_id,
        event=event,
    )


async def ingest_webhook(body: bytes, broadcaster: Broadcaster) -> ChallengeResponse | WebhookAck:
    payload = parse_webhook_body(body)

    # monday.com verifies the callback URL by expecting its challenge echoed back
    if payload.challenge is not None:
        logger.info("Answering webhook challenge")
        return ChallengeResponse(challenge=payload.challenge)

    live_event = build_event(payload.event)
    delivered = await broadcaster.broadcast(live_event.to_payload())
    logger.info(
        "Webhook %s for board %s delivered to %d channels",
        (payload.event or {}).get("type", "<empty>"),
        live_event.board_id,
        delivered,
    )
    return WebhookAck()
