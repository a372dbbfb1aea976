"""
Factory classes for Dependency Injection

Provides factory methods to create implementations based on configuration.
"""

from .store_factory import SecureStoreFactory
from .auth_factory import AuthProviderFactory
from .client_factory import ClientFactory

__all__ = [
    "SecureStoreFactory",
    "AuthProviderFactory",
    "ClientFactory",
]
