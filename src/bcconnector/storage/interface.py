"""
Secure Store Interface

Defines contract for persisted credential storage (string values by key).
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional


class ISecureStore(ABC):
    """Interface for secure key-value stores scoped to one service identifier"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a stored value.

        Args:
            key: Entry name within the store's service

        Returns:
            The stored string, or None if absent

        Raises:
            SecureStoreError: If the backing store cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Optional[str]) -> None:
        """
        Write a value, replacing any previous one. A None value deletes the entry.

        Raises:
            SecureStoreError: If the backing store cannot be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an entry; missing entries are ignored"""
        pass

    def set_many(self, values: Mapping[str, Optional[str]]) -> None:
        """
        Write several entries together (None deletes). Backends that support
        transactions write all of them or none.
        """
        for key, value in values.items():
            self.set(key, value)

    def close(self) -> None:
        """Release backing resources"""


class SecureStoreError(Exception):
    """Secure store operation errors"""
    pass
