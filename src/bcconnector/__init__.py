"""
BCConnector

OAuth2 token lifecycle and REST client for Microsoft Dynamics 365 Business Central.
"""

__version__ = "0.1.0"

from .auth import TokenStore
from .client import BusinessCentralClient, ODataQuery
from .config import Settings, TenantContext, get_settings
from .di_container import DIContainer
from .errors import (
    ApiError,
    DecodeFailureError,
    HttpStatusError,
    InvalidConfigurationError,
    TransportError,
    UnauthenticatedError,
)
from .models import Envelope, Token

__all__ = [
    "TokenStore",
    "BusinessCentralClient",
    "ODataQuery",
    "Settings",
    "TenantContext",
    "get_settings",
    "DIContainer",
    "ApiError",
    "DecodeFailureError",
    "HttpStatusError",
    "InvalidConfigurationError",
    "TransportError",
    "UnauthenticatedError",
    "Envelope",
    "Token",
]
