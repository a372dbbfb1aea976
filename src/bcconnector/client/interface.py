"""
Business Central Client Interface

Defines contract for Business Central REST clients
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, List, Optional, Type, TypeVar

from ..models import Envelope
from .query import ODataQuery

T = TypeVar("T")


class IBusinessCentralClient(ABC):
    """Interface for Business Central API v2.0 clients"""

    @abstractmethod
    async def fetch(self, endpoint: str, model: Type[T], query: Optional[ODataQuery] = None) -> T:
        """
        Execute an authenticated GET and decode the JSON body.

        Args:
            endpoint: Path relative to the tenant/environment API base
            model: Record type (or Envelope[...]) to decode into
            query: OData query options

        Returns:
            Decoded response body

        Raises:
            ApiError: Any subclass of the error taxonomy
        """
        pass

    @abstractmethod
    async def fetch_paged(
        self, endpoint: str, model: Type[T], query: Optional[ODataQuery] = None
    ) -> List[T]:
        """
        Fetch a collection, following at most one @odata.nextLink.

        Returns:
            Items of the first page followed by items of the second page, if any
        """
        pass

    @abstractmethod
    def iter_pages(
        self,
        endpoint: str,
        model: Type[T],
        query: Optional[ODataQuery] = None,
        max_pages: Optional[int] = None,
    ) -> AsyncIterator[Envelope[T]]:
        """
        Lazily yield collection pages, following next links until absent.

        Args:
            max_pages: Stop after this many pages (None follows every link)
        """
        pass

    @abstractmethod
    async def authorized_data(self, url: str) -> bytes:
        """
        Fetch a binary payload (e.g. an item picture) with the bearer token.

        Args:
            url: Absolute URL, or a path relative to the API base
        """
        pass

    @abstractmethod
    def get_client_info(self) -> Dict[str, Any]:
        """
        Get client implementation information.

        Returns:
            Client metadata (base URL, company, capabilities)
        """
        pass
