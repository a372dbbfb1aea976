"""
Dependency Injection Container

Centralized construction of the secure store, token store and REST client.
"""

from typing import Dict, Any, Optional
import httpx
import structlog

from .config import Settings, get_settings
from .factories import AuthProviderFactory, ClientFactory, SecureStoreFactory
from .auth import IAuthorizationCodeSource, TokenStore
from .client import BusinessCentralClient
from .storage import ISecureStore

logger = structlog.get_logger(__name__)


class DIContainer:
    """
    Dependency Injection Container for managing service dependencies.

    Services are created lazily and cached; one HTTP connection pool is
    shared by the token store and the REST client.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        code_source: Optional[IAuthorizationCodeSource] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.code_source = code_source
        self._services: Dict[str, Any] = {}
        self._owns_http_client = http_client is None
        if http_client is not None:
            self._services['http_client'] = http_client

        logger.info("DI Container initialized",
                    secure_store=self.settings.secure_store,
                    environment=self.settings.bc_environment,
                    interactive=code_source is not None)

    async def close(self) -> None:
        """Clean up all dependencies"""
        if 'http_client' in self._services and self._owns_http_client:
            await self._services['http_client'].aclose()

        if 'secure_store' in self._services:
            self._services['secure_store'].close()

        self._services.clear()
        logger.info("DI Container closed")

    async def __aenter__(self) -> "DIContainer":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # Core Dependencies
    def get_http_client(self) -> httpx.AsyncClient:
        """Get shared HTTP client (lazy initialization)"""
        if 'http_client' not in self._services:
            self._services['http_client'] = httpx.AsyncClient(timeout=self.settings.request_timeout)
            logger.debug("HTTP client created", timeout=self.settings.request_timeout)
        return self._services['http_client']

    def get_secure_store(self) -> ISecureStore:
        """Get secure store instance (lazy initialization)"""
        if 'secure_store' not in self._services:
            self._services['secure_store'] = SecureStoreFactory.create(self.settings)
            logger.debug("Secure store created", type=self.settings.secure_store)
        return self._services['secure_store']

    def get_token_store(self) -> TokenStore:
        """Get token store instance (lazy initialization)"""
        if 'token_store' not in self._services:
            self._services['token_store'] = AuthProviderFactory.create(
                self.settings,
                self.get_secure_store(),
                code_source=self.code_source,
                http_client=self.get_http_client(),
            )
            logger.debug("Token store created")
        return self._services['token_store']

    def get_client(self) -> BusinessCentralClient:
        """Get Business Central client instance (lazy initialization)"""
        if 'client' not in self._services:
            self._services['client'] = ClientFactory.create(
                self.settings, self.get_token_store(), http_client=self.get_http_client()
            )
            logger.debug("Business Central client created")
        return self._services['client']

    # Service Info
    def get_container_info(self) -> Dict[str, Any]:
        """Get container status and dependency information"""
        return {
            "cached_services": list(self._services.keys()),
            "settings": {
                "tenant_id": self.settings.azure_tenant_id,
                "environment": self.settings.bc_environment,
                "company_id": self.settings.bc_company_id,
                "secure_store": self.settings.secure_store,
                "secure_store_path": str(self.settings.secure_store_path_resolved),
            }
        }
