"""monday.com GraphQL client.

All calls go through one ``POST`` endpoint. Non-2xx responses and GraphQL
``errors`` arrays are raised as :class:`MondayAPIError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from taskpulse.common.enums import MondayWebhookEvent
from taskpulse.common.exceptions import ConfigurationError, MondayAPIError
from taskpulse.config import settings
from taskpulse.core.metrics.schemas import Board, BoardSummary
from taskpulse.integrations.base import BaseIntegration

BOARDS_QUERY = """
query {
  boards {
    id
    name
    description
    items_count
  }
}
"""

BOARD_DETAILS_QUERY = """
query GetBoards($boardIds: [ID!]!) {
  boards(ids: $boardIds) {
    id
    name
    items_page {
      items {
        id
        name
        column_values { id text value }
        subitems {
          id
          name
          column_values { id text value }
        }
      }
    }
  }
}
"""

CREATE_WEBHOOK_MUTATION = """
mutation CreateWebhook($boardId: ID!, $url: String!, $event: WebhookEventType!) {
  create_webhook(board_id: $boardId, url: $url, event: $event) {
    id
    board_id
    event
  }
}
"""

WEBHOOKS_QUERY = """
query GetWebhooks($boardId: ID!) {
  webhooks(board_id: $boardId) {
    id
    board_id
    event
    config
  }
}
"""

ME_QUERY = "query { me { id } }"


def normalize_board(raw: dict[str, Any]) -> Board:
    """Flatten the ``items_page`` envelope into ``Board.items``."""
    items = raw.get("items")
    if items is None:
        items = (raw.get("items_page") or {}).get("items") or []
    return Board.model_validate({"id": raw["id"], "name": raw.get("name", ""), "items": items})


class MondayClient(BaseIntegration):
    def __init__(
        self,
        token: str | None = None,
        api_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__("monday")
        self.token = settings.MONDAY_API_TOKEN if token is None else token
        if not self.token:
            raise ConfigurationError("MONDAY_API_TOKEN")
        self.api_url = api_url or settings.MONDAY_API_URL
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self.token,
            "Content-Type": "application/json",
            "API-Version": settings.MONDAY_API_VERSION,
        }

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL document and return the full response body."""
        body: dict[str, Any] = {"query": query}
        if variables:
            body["variables"] = variables

        async with httpx.AsyncClient(timeout=settings.MONDAY_REQUEST_TIMEOUT, transport=self._transport) as client:
            try:
                resp = await client.post(self.api_url, json=body, headers=self._headers())
            except httpx.HTTPError as e:
                raise MondayAPIError(f"Request to monday.com failed: {e}") from e

        if resp.is_error:
            raise MondayAPIError(
                f"API request failed: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
            )

        try:
            result = resp.json()
        except ValueError as e:
            raise MondayAPIError("monday.com returned a non-JSON response", status_code=resp.status_code) from e

        if not isinstance(result, dict) or ("data" not in result and "errors" not in result):
            raise MondayAPIError("Response does not match the GraphQL envelope", status_code=resp.status_code)

        errors = result.get("errors") or []
        if errors:
            messages = ", ".join(str(err.get("message", err)) for err in errors)
            self.logger.error("monday.com returned GraphQL errors: %s", messages)
            raise MondayAPIError(f"monday.com API error: {messages}", status_code=resp.status_code, errors=errors)

        return result

    async def _request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        result = await self.execute(query, variables)
        return result.get("data") or {}

    async def health_check(self) -> bool:
        try:
            await self._request(ME_QUERY)
            return True
        except MondayAPIError as e:
            self.logger.error("monday.com health check failed: %s", e)
            return False

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    async def get_boards(self) -> list[BoardSummary]:
        data = await self._request(BOARDS_QUERY)
        boards = [BoardSummary.model_validate(b) for b in data.get("boards") or []]
        if not boards:
            self.logger.warning("No boards found in monday.com account")
        self.logger.info("Fetched %d boards", len(boards))
        return boards

    async def get_boards_with_items(self, board_ids: Sequence[str]) -> list[Board]:
        if not board_ids:
            return []
        data = await self._request(BOARD_DETAILS_QUERY, {"boardIds": [str(b) for b in board_ids]})
        boards = [normalize_board(raw) for raw in data.get("boards") or []]
        self.logger.info("Fetched %d boards with items (requested %d)", len(boards), len(board_ids))
        return boards

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    async def create_webhook(self, board_id: str, url: str, event: MondayWebhookEvent) -> dict[str, Any]:
        data = await self._request(
            CREATE_WEBHOOK_MUTATION,
            {"boardId": str(board_id), "url": url, "event": event.value},
        )
        webhook = data.get("create_webhook") or {}
        self.logger.info("Created %s webhook for board %s", event.value, board_id)
        return webhook

    async def create_board_webhooks(self, board_id: str, url: str) -> list[dict[str, Any]]:
        """Register one webhook per tracked event; failures are logged and skipped."""
        webhooks = []
        for event in MondayWebhookEvent:
            try:
                webhook = await self.create_webhook(board_id, url, event)
            except MondayAPIError as e:
                self.logger.error("Failed to create %s webhook for board %s: %s", event.value, board_id, e)
                continue
            if webhook:
                webhooks.append(webhook)
        return webhooks

    async def list_webhooks(self, board_id: str) -> list[dict[str, Any]]:
        data = await self._request(WEBHOOKS_QUERY, {"boardId": str(board_id)})
        return data.get("webhooks") or []


async def fetch_boards(board_ids: Sequence[str]) -> list[Board]:
    return await MondayClient().get_boards_with_items(board_ids)
