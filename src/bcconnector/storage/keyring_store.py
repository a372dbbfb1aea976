"""
Keyring Secure Store

Keeps credentials in the operating system keychain (macOS Keychain, Windows
Credential Locker, Secret Service on Linux) through the keyring library.
"""

from typing import Mapping, Optional

import keyring
import structlog
from keyring.errors import KeyringError, PasswordDeleteError

from .interface import ISecureStore, SecureStoreError

logger = structlog.get_logger(__name__)


class KeyringSecureStore(ISecureStore):
    """System keyring store; entries are (service, key) pairs"""

    def __init__(self, service: str = "BCConnector"):
        self.service = service
        logger.debug("Keyring secure store initialized", service=service,
                     backend=type(keyring.get_keyring()).__name__)

    def get(self, key: str) -> Optional[str]:
        try:
            return keyring.get_password(self.service, key)
        except KeyringError as e:
            raise SecureStoreError(f"Failed to read '{key}' from keyring: {e}") from e

    def set(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self.delete(key)
            return
        try:
            keyring.set_password(self.service, key, value)
        except KeyringError as e:
            raise SecureStoreError(f"Failed to write '{key}' to keyring: {e}") from e

    def delete(self, key: str) -> None:
        try:
            keyring.delete_password(self.service, key)
        except PasswordDeleteError:
            pass
        except KeyringError as e:
            raise SecureStoreError(f"Failed to delete '{key}' from keyring: {e}") from e

    def set_many(self, values: Mapping[str, Optional[str]]) -> None:
        """Write entries one by one, restoring the previous values if any write fails"""
        previous = {key: self.get(key) for key in values}
        try:
            for key, value in values.items():
                self.set(key, value)
        except SecureStoreError:
            for key, value in previous.items():
                try:
                    self.set(key, value)
                except SecureStoreError as e:
                    logger.error("Failed to restore keyring entry", key=key, error=str(e))
            raise
