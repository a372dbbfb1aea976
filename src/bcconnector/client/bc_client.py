"""
Business Central REST Client

Authenticated GETs against the tenant/environment-scoped Business Central
API v2.0, with typed decoding and error normalisation.
"""

import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Type, TypeVar

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from ..auth import ITokenProvider
from ..config import Settings
from ..entities import BCEnvironment, Company, Customer, Item, ItemDetail, SalesOrder, Vendor
from ..errors import (
    DecodeFailureError,
    HttpStatusError,
    InvalidConfigurationError,
    TransportError,
    UnauthenticatedError,
)
from ..models import Envelope, describe_validation_error, parse_error_details
from .interface import IBusinessCentralClient
from .query import ODataQuery

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Tenant ids are GUIDs or verified domain names; environment names are short identifiers
_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class BusinessCentralClient(IBusinessCentralClient):
    """HTTP client for the Business Central API v2.0"""

    API_VERSION = "v2.0"
    ENVIRONMENTS_PATH = "environments/v1.1"
    MAX_PAGES = 2

    def __init__(
        self,
        settings: Settings,
        token_provider: ITokenProvider,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings
        self.token_provider = token_provider
        self._http_client = http_client
        self._adapters: Dict[Any, TypeAdapter] = {}

    # URL construction

    @property
    def base_url(self) -> str:
        """
        Tenant/environment-scoped API root.

        Raises:
            InvalidConfigurationError: If the tenant id or environment is empty or malformed
        """
        tenant_id = self.settings.azure_tenant_id.strip()
        environment = self.settings.bc_environment.strip()

        for name, value in (("tenant id", tenant_id), ("environment", environment)):
            if not value:
                raise InvalidConfigurationError(f"Business Central {name} is not configured")
            if not _SEGMENT_PATTERN.match(value):
                raise InvalidConfigurationError(f"Business Central {name} is malformed: {value!r}")

        api_root = self.settings.bc_api_base_url.rstrip("/")
        return f"{api_root}/{self.API_VERSION}/{tenant_id}/{environment}/api/{self.API_VERSION}"

    def build_url(self, endpoint: str) -> str:
        """Join an endpoint with the API base; absolute URLs are used as given"""
        if endpoint.startswith(("http://", "https://")):
            url = endpoint
        else:
            url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            raise InvalidConfigurationError(f"Invalid request URL {url!r}: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise InvalidConfigurationError(f"Invalid request URL {url!r}")
        return url

    def company_endpoint(self, entity: str) -> str:
        """Scope an entity path to the configured company"""
        company_id = self.settings.bc_company_id.strip()
        if not company_id:
            raise InvalidConfigurationError("Business Central company id is not configured")
        return f"companies({company_id})/{entity.lstrip('/')}"

    # Generic operations

    async def fetch(self, endpoint: str, model: Type[T], query: Optional[ODataQuery] = None) -> T:
        url = self.build_url(endpoint)
        params = query.to_params() if query else None
        return await self._fetch_url(url, model, params)

    async def fetch_paged(
        self, endpoint: str, model: Type[T], query: Optional[ODataQuery] = None
    ) -> List[T]:
        items: List[T] = []
        pages = 0
        async for page in self.iter_pages(endpoint, model, query, max_pages=self.MAX_PAGES):
            items.extend(page.value)
            pages += 1

        logger.info("Collection fetched", endpoint=endpoint, pages=pages, record_count=len(items))
        return items

    async def iter_pages(
        self,
        endpoint: str,
        model: Type[T],
        query: Optional[ODataQuery] = None,
        max_pages: Optional[int] = None,
    ) -> AsyncIterator[Envelope[T]]:
        envelope_model = Envelope[model]  # type: ignore[valid-type]

        page = await self.fetch(endpoint, envelope_model, query)
        yield page
        pages = 1

        while page.next_link and (max_pages is None or pages < max_pages):
            logger.debug("Following next link", endpoint=endpoint, page=pages + 1)
            # The next link already carries the query options
            page = await self._fetch_url(self.build_url(page.next_link), envelope_model)
            yield page
            pages += 1

    async def authorized_data(self, url: str) -> bytes:
        response = await self._get(self.build_url(url), accept="*/*")
        logger.debug("Binary payload fetched", size_bytes=len(response.content))
        return response.content

    # Business Central entities

    async def list_companies(self, query: Optional[ODataQuery] = None) -> List[Company]:
        return await self.fetch_paged("companies", Company, query)

    async def list_customers(self, query: Optional[ODataQuery] = None) -> List[Customer]:
        return await self.fetch_paged(self.company_endpoint("customers"), Customer, query)

    async def list_vendors(self, query: Optional[ODataQuery] = None) -> List[Vendor]:
        return await self.fetch_paged(self.company_endpoint("vendors"), Vendor, query)

    async def list_items(self, query: Optional[ODataQuery] = None) -> List[Item]:
        return await self.fetch_paged(self.company_endpoint("items"), Item, query)

    async def get_item(self, item_id: str) -> ItemDetail:
        return await self.fetch(self.company_endpoint(f"items({item_id})"), ItemDetail)

    async def item_picture(self, item_id: str) -> bytes:
        return await self.authorized_data(
            self.company_endpoint(f"items({item_id})/picture/pictureContent")
        )

    async def list_sales_orders(self, query: Optional[ODataQuery] = None) -> List[SalesOrder]:
        return await self.fetch_paged(self.company_endpoint("salesOrders"), SalesOrder, query)

    async def list_environments(self) -> List[BCEnvironment]:
        """Environments the signed-in user can reach in the configured tenant"""
        url = self.build_url(f"{self.settings.bc_api_base_url.rstrip('/')}/{self.ENVIRONMENTS_PATH}")
        envelope = await self._fetch_url(url, Envelope[BCEnvironment])
        return envelope.value

    def get_client_info(self) -> Dict[str, Any]:
        try:
            base_url: Optional[str] = self.base_url
        except InvalidConfigurationError:
            base_url = None
        return {
            "type": "business_central_rest",
            "api_version": self.API_VERSION,
            "base_url": base_url,
            "company_id": self.settings.bc_company_id or None,
            "company_name": self.settings.bc_company_name or None,
            "max_pages": self.MAX_PAGES,
            "capabilities": ["fetch", "fetch_paged", "iter_pages", "authorized_data"],
        }

    # HTTP

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
        else:
            async with httpx.AsyncClient(timeout=self.settings.request_timeout) as client:
                yield client

    async def _fetch_url(
        self, url: str, model: Type[T], params: Optional[Dict[str, str]] = None
    ) -> T:
        response = await self._get(url, params=params)
        return self._decode(response.content, model, url)

    async def _get(
        self,
        url: str,
        params: Optional[Dict[str, str]] = None,
        accept: str = "application/json",
    ) -> httpx.Response:
        token = await self.token_provider.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": accept,
        }

        logger.debug("GET", url=url, params=params)

        try:
            async with self._session() as client:
                response = await client.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=self.settings.request_timeout,
                )
        except httpx.InvalidURL as e:
            raise InvalidConfigurationError(f"Invalid request URL {url!r}: {e}") from e
        except httpx.TimeoutException as e:
            logger.error("Request timed out", url=url)
            raise TransportError(f"GET {url} timed out") from e
        except httpx.HTTPError as e:
            logger.error("Request error", url=url, error=str(e))
            raise TransportError(f"GET {url} failed: {e}") from e

        status = response.status_code
        if 200 <= status < 300:
            return response

        details = parse_error_details(response.content)
        message = f"GET {url} failed with HTTP {status}"
        if details.get("message"):
            message = f"{message}: {details['message']}"

        logger.error(
            "Business Central request failed",
            url=url,
            status_code=status,
            error_code=details.get("code"),
        )

        if status == 401:
            raise UnauthenticatedError(message, details, status_code=status)
        raise HttpStatusError(status, message, details)

    def _decode(self, body: bytes, model: Type[T], url: str) -> T:
        adapter = self._adapters.get(model)
        if adapter is None:
            adapter = TypeAdapter(model)
            self._adapters[model] = adapter

        try:
            return adapter.validate_json(body)
        except ValidationError as e:
            name = getattr(model, "__name__", str(model))
            raise DecodeFailureError(
                f"Response from {url} does not match {name}: {describe_validation_error(e)}"
            ) from e
