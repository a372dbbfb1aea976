"""
Secure Store Factory

Creates credential store instances based on configuration.
"""

import structlog

from ..config import Settings
from ..storage import ISecureStore, InMemorySecureStore, KeyringSecureStore, SQLiteSecureStore

logger = structlog.get_logger(__name__)


class SecureStoreFactory:
    """Factory for creating secure stores"""

    @staticmethod
    def create(settings: Settings) -> ISecureStore:
        """
        Create secure store based on configuration.

        Args:
            settings: Application settings

        Returns:
            Configured secure store scoped to settings.secure_store_service

        Raises:
            ValueError: If store type is not supported
        """
        store_type = settings.secure_store.lower()

        logger.info("Creating secure store", store_type=store_type)

        if store_type == "keyring":
            return KeyringSecureStore(service=settings.secure_store_service)
        elif store_type == "sqlite":
            return SQLiteSecureStore(
                settings.secure_store_path_resolved, service=settings.secure_store_service
            )
        elif store_type == "memory":
            return InMemorySecureStore(service=settings.secure_store_service)
        else:
            raise ValueError(f"Unsupported secure store: {store_type}")

    @staticmethod
    def get_available_stores() -> list[str]:
        """Get list of available secure store types"""
        return ["keyring", "sqlite", "memory"]
