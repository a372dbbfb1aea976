"""
Business Central Client Factory

Creates client instances bound to a token provider.
"""

from typing import Optional

import httpx
import structlog

from ..auth import ITokenProvider
from ..client import BusinessCentralClient
from ..config import Settings

logger = structlog.get_logger(__name__)


class ClientFactory:
    """Factory for creating Business Central clients"""

    @staticmethod
    def create(
        settings: Settings,
        token_provider: ITokenProvider,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> BusinessCentralClient:
        """
        Create Business Central client.

        Args:
            settings: Application settings
            token_provider: Source of bearer tokens
            http_client: Shared HTTP client (None opens one per request)

        Returns:
            Configured client instance
        """
        logger.info(
            "Creating Business Central client",
            environment=settings.bc_environment,
            company_id=settings.bc_company_id or None,
        )
        return BusinessCentralClient(settings, token_provider, http_client=http_client)
