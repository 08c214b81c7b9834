"""External service clients used by TaskPulse."""

from taskpulse.integrations.base import BaseIntegration
from taskpulse.integrations.monday import MondayClient

__all__ = [
    "BaseIntegration",
    "MondayClient",
]
