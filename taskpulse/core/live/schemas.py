from datetime import datetime, timezone
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from taskpulse.common.enums import LiveEventType


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProviderEvent(BaseModel):
    """The ``event`` object monday.com posts to webhook subscribers."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    type: str | None = None
    board_id: str | None = Field(None, validation_alias=AliasChoices("boardId", "board_id"))
    item_id: str | None = Field(None, validation_alias=AliasChoices("itemId", "pulseId", "item_id"))


class WebhookPayload(BaseModel):
    challenge: Any = None
    event: dict[str, Any] | None = None


class WebhookEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    type: str
    board_id: str | None = Field(None, alias="boardId")
    item_id: str | None = Field(None, alias="itemId")
    timestamp: str = Field(default_factory=_now_iso)
    event: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def connected_event() -> WebhookEvent:
    return WebhookEvent(type=LiveEventType.CONNECTED.value)


class WebhookAck(BaseModel):
    ok: bool = True


class ChallengeResponse(BaseModel):
    challenge: Any
