"""
Authentication module for BCConnector

Handles the Entra ID OAuth2 token lifecycle for Business Central access.
"""

from .interface import ITokenProvider, IAuthorizationCodeSource
from .code_source import ConsoleCodeSource, StaticCodeSource, parse_authorization_response
from .token_store import TokenStore

__all__ = [
    "ITokenProvider",
    "IAuthorizationCodeSource",
    "ConsoleCodeSource",
    "StaticCodeSource",
    "parse_authorization_response",
    "TokenStore",
]
