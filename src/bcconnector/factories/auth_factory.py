"""
Authentication Provider Factory

Creates token stores wired to their secure store and sign-in source.
"""

from typing import Optional

import httpx
import structlog

from ..auth import IAuthorizationCodeSource, TokenStore
from ..config import Settings
from ..storage import ISecureStore

logger = structlog.get_logger(__name__)


class AuthProviderFactory:
    """Factory for creating token stores"""

    @staticmethod
    def create(
        settings: Settings,
        secure_store: ISecureStore,
        code_source: Optional[IAuthorizationCodeSource] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> TokenStore:
        """
        Create a token store.

        Args:
            settings: Application settings
            secure_store: Store holding persisted credentials
            code_source: Interactive sign-in mechanism (None disables interactive sign-in)
            http_client: Shared HTTP client (None opens one per request)

        Returns:
            Token store seeded from the secure store
        """
        logger.info(
            "Creating token store",
            interactive=code_source is not None,
            confidential_client=bool(settings.azure_client_secret),
        )
        return TokenStore(settings, secure_store, code_source=code_source, http_client=http_client)
