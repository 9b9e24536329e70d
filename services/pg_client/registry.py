from typing import Iterable, Optional

import httpx
import structlog

from shared.config.settings import PgSettings
from shared.errors import NoProcessorAvailableError

from .base import PgClient
from .mock import MockPgClient
from .testpg import TestPgClient

logger = structlog.get_logger(__name__)


class PgClientRegistry:
    """Adapters in registration order. Fixed after construction."""

    def __init__(self, clients: Iterable[PgClient]):
        self.clients = tuple(clients)

    def select(self, partner_id: int) -> PgClient:
        """First adapter that claims the partner wins."""
        for client in self.clients:
            if client.supports(partner_id):
                return client
        logger.error("pg_client_unavailable", partner_id=partner_id,
                     registered=[c.name for c in self.clients])
        raise NoProcessorAvailableError(partner_id)

    async def aclose(self) -> None:
        for client in self.clients:
            await client.aclose()


def build_pg_registry(settings: PgSettings, http_client: Optional[httpx.AsyncClient] = None) -> PgClientRegistry:
    clients: list[PgClient] = []

    if settings.test_pg.api_key:
        # Raises on a malformed IV: a misconfigured processor must stop startup
        clients.append(TestPgClient(settings.test_pg, http_client=http_client))
    else:
        logger.warning("test_pg_disabled", reason="TEST_PG_API_KEY is not set")

    if settings.mock_pg_enabled:
        logger.warning("mock_pg_enabled", detail="development processor approves every odd partner")
        clients.append(MockPgClient())

    logger.info("pg_registry_built", clients=[c.name for c in clients])
    return PgClientRegistry(clients)
