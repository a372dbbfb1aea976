"""
Credential storage

Secure key-value stores used to persist OAuth tokens across restarts.
"""

from .interface import ISecureStore, SecureStoreError
from .keyring_store import KeyringSecureStore
from .memory_store import InMemorySecureStore
from .sqlite_store import SQLiteSecureStore

__all__ = [
    "ISecureStore",
    "SecureStoreError",
    "KeyringSecureStore",
    "InMemorySecureStore",
    "SQLiteSecureStore",
]
