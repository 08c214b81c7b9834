from abc import ABC, abstractmethod

from taskpulse.common.logging import get_logger


class BaseIntegration(ABC):
    """Base class for external API clients.

    Provides a namespaced logger and a required health_check so the API can
    report upstream reachability.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"integrations.{name}")

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the integration is reachable and functional."""
        ...
