"""
Business Central client module

HTTP client for the Business Central API v2.0.
"""

from .interface import IBusinessCentralClient
from .query import ODataQuery, quote_literal
from .bc_client import BusinessCentralClient

__all__ = [
    "IBusinessCentralClient",
    "ODataQuery",
    "quote_literal",
    "BusinessCentralClient",
]
