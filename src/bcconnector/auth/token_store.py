"""
OAuth2 Token Store

Owns the Entra ID access/refresh token pair for Business Central: serves cached
tokens, refreshes or re-runs the authorization-code flow when they go stale,
and persists them in a secure store.
"""

import asyncio
import urllib.parse
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple

import httpx
import structlog
from pydantic import ValidationError

from ..config import Settings
from ..errors import (
    ApiError,
    DecodeFailureError,
    InvalidConfigurationError,
    TransportError,
    UnauthenticatedError,
)
from ..models import Token, TokenResponse, describe_validation_error, parse_error_details, utcnow
from ..storage import ISecureStore
from .code_source import create_state, generate_pkce, parse_authorization_response
from .interface import IAuthorizationCodeSource, ITokenProvider

logger = structlog.get_logger(__name__)

AuthStateListener = Callable[[bool], None]


class TokenStore(ITokenProvider):
    """Token lifecycle manager for the OAuth2 authorization-code + refresh-token grants"""

    ACCESS_TOKEN_KEY = "access_token"
    REFRESH_TOKEN_KEY = "refresh_token"
    EXPIRES_AT_KEY = "expires_at"

    def __init__(
        self,
        settings: Settings,
        secure_store: ISecureStore,
        code_source: Optional[IAuthorizationCodeSource] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.settings = settings
        self.secure_store = secure_store
        self.code_source = code_source
        self._http_client = http_client
        self._clock = clock
        self._skew = timedelta(seconds=settings.token_expiry_skew_seconds)

        self._token: Optional[Token] = None
        self._pending_authorization: Optional[Tuple[str, str]] = None  # (state, verifier)
        self._renewal: Optional["asyncio.Task[str]"] = None
        self._listeners: List[AuthStateListener] = []

        self.load_persisted()

        logger.info(
            "Token store initialized",
            tenant_id=settings.azure_tenant_id,
            client_id=settings.azure_client_id,
            authenticated=self.is_authenticated,
        )

    # Endpoints

    @property
    def token_endpoint(self) -> str:
        return f"{self.settings.authority_url}/token"

    @property
    def authorize_endpoint(self) -> str:
        return f"{self.settings.authority_url}/authorize"

    # Observable state

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def token(self) -> Optional[Token]:
        return self._token

    def subscribe(self, listener: AuthStateListener) -> None:
        """Add listener called with the new value whenever is_authenticated changes"""
        self._listeners.append(listener)

    def unsubscribe(self, listener: AuthStateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, authenticated: bool) -> None:
        for listener in list(self._listeners):
            try:
                listener(authenticated)
            except Exception as e:
                logger.error("Error in auth state listener", error=str(e))

    # Persistence

    def load_persisted(self) -> None:
        """Seed in-memory state from the secure store; missing fields mean signed out"""
        access_token = self.secure_store.get(self.ACCESS_TOKEN_KEY)
        expires_at_raw = self.secure_store.get(self.EXPIRES_AT_KEY)
        refresh_token = self.secure_store.get(self.REFRESH_TOKEN_KEY)

        if not access_token or not expires_at_raw:
            logger.debug("No persisted token found")
            self._token = None
            return

        try:
            expires_at = datetime.fromisoformat(expires_at_raw)
        except ValueError:
            logger.warning("Ignoring persisted token with unreadable expiry")
            self._token = None
            return

        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        self._token = Token(
            access_token=access_token,
            refresh_token=refresh_token or None,
            expires_at=expires_at,
        )
        logger.info("Persisted token loaded", expires_at=expires_at.isoformat(),
                    has_refresh_token=bool(refresh_token))

    def _store_token(self, token: Optional[Token]) -> None:
        was_authenticated = self.is_authenticated
        self._token = token

        if token is None:
            self.secure_store.set_many({
                self.ACCESS_TOKEN_KEY: None,
                self.REFRESH_TOKEN_KEY: None,
                self.EXPIRES_AT_KEY: None,
            })
        else:
            # A response without a refresh token must not leave a stale one behind
            self.secure_store.set_many({
                self.ACCESS_TOKEN_KEY: token.access_token,
                self.REFRESH_TOKEN_KEY: token.refresh_token,
                self.EXPIRES_AT_KEY: token.expires_at.isoformat(),
            })

        if was_authenticated != self.is_authenticated:
            self._notify(self.is_authenticated)

    # Token access

    async def get_access_token(self) -> str:
        """
        Get a valid access token, refreshing or re-authenticating when needed.

        A cached token that has not expired is returned without any I/O.
        Concurrent callers share a single in-flight renewal.

        Raises:
            UnauthenticatedError: If neither refresh nor sign-in succeeds, or
                logout() interrupts the renewal
            TransportError: If the token endpoint cannot be reached
        """
        token = self._token
        if token is not None and token.is_fresh(self._clock(), self._skew):
            return token.access_token

        if self._renewal is None or self._renewal.done():
            self._renewal = asyncio.create_task(self._renew())
            self._renewal.add_done_callback(self._renewal_finished)
        else:
            logger.debug("Joining in-flight token renewal")

        renewal = self._renewal
        try:
            # A cancelled caller must not cancel the renewal other callers wait on
            return await asyncio.shield(renewal)
        except asyncio.CancelledError:
            # Only logout() cancels the renewal itself
            if renewal.cancelled():
                raise UnauthenticatedError("Signed out during token renewal") from None
            raise

    def _renewal_finished(self, task: "asyncio.Task[str]") -> None:
        if self._renewal is task:
            self._renewal = None
        if not task.cancelled():
            # Mark the exception retrieved when every waiter was cancelled
            task.exception()

    async def _renew(self) -> str:
        refresh_token = self._token.refresh_token if self._token else None

        if refresh_token:
            try:
                token = await self.refresh(refresh_token)
                return token.access_token
            except ApiError as e:
                logger.warning(
                    "Token refresh failed, falling back to sign-in",
                    error_type=type(e).__name__,
                    error=e.message,
                )

        token = await self.authenticate()
        return token.access_token

    # Authorization-code grant

    def authorization_url(self) -> str:
        """Build the authorize URL and remember its state/PKCE verifier"""
        self._require_configuration()

        state = create_state()
        verifier, challenge = generate_pkce()
        self._pending_authorization = (state, verifier)

        params = {
            "client_id": self.settings.azure_client_id,
            "redirect_uri": self.settings.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.settings.scopes),
            "state": state,
            "code_challenge": challenge,
            "code_challenge_method": "S256",
        }
        return f"{self.authorize_endpoint}?{urllib.parse.urlencode(params)}"

    async def authenticate(self, code: Optional[str] = None) -> Token:
        """
        Run the authorization-code grant.

        Args:
            code: Authorization code obtained out of band. When omitted the
                configured code source is asked to run the browser sign-in.

        Returns:
            The newly stored token
        """
        if code is not None:
            verifier = self._pending_authorization[1] if self._pending_authorization else None
            self._pending_authorization = None
            return await self._exchange_code(code, verifier)

        if self.code_source is None:
            raise UnauthenticatedError(
                "Sign-in required but no authorization code source is configured"
            )

        url = self.authorization_url()
        logger.info("Starting interactive sign-in", tenant_id=self.settings.azure_tenant_id)
        redirect = await self.code_source.request_code(url)
        return await self.handle_redirect(redirect)

    async def handle_redirect(self, redirect: str) -> Token:
        """Complete a sign-in from the redirect URL (or bare code) the browser produced"""
        response = parse_authorization_response(redirect)

        if response.error:
            self._pending_authorization = None
            details = {"code": response.error}
            if response.error_description:
                details["message"] = response.error_description
            raise UnauthenticatedError(f"Sign-in was rejected: {response.error}", details)

        if not response.code:
            raise UnauthenticatedError("Redirect did not contain an authorization code")

        verifier: Optional[str] = None
        if self._pending_authorization is not None:
            expected_state, verifier = self._pending_authorization
            if response.state is not None and response.state != expected_state:
                self._pending_authorization = None
                raise UnauthenticatedError("Authorization state mismatch")

        self._pending_authorization = None
        return await self._exchange_code(response.code, verifier)

    async def _exchange_code(self, code: str, verifier: Optional[str]) -> Token:
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.settings.redirect_uri,
        }
        if verifier:
            form["code_verifier"] = verifier

        token = await self._request_token(form)
        logger.info("Authorization code exchanged", expires_at=token.expires_at.isoformat(),
                    has_refresh_token=bool(token.refresh_token))
        return token

    # Refresh-token grant

    async def refresh(self, refresh_token: str) -> Token:
        """Exchange a refresh token for a new token pair"""
        token = await self._request_token({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        logger.info("Access token refreshed", expires_at=token.expires_at.isoformat(),
                    has_refresh_token=bool(token.refresh_token))
        return token

    # Logout

    def logout(self) -> None:
        """Forget all credentials; the next get_access_token() signs in from scratch"""
        if self._renewal is not None and not self._renewal.done():
            self._renewal.cancel()
        self._renewal = None
        self._pending_authorization = None
        self._store_token(None)
        logger.info("Signed out")

    # HTTP

    def _require_configuration(self) -> None:
        missing = [
            name for name, value in (
                ("azure_tenant_id", self.settings.azure_tenant_id),
                ("azure_client_id", self.settings.azure_client_id),
            )
            if not value
        ]
        if missing:
            raise InvalidConfigurationError(f"Missing OAuth settings: {', '.join(missing)}")

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
        else:
            async with httpx.AsyncClient(timeout=self.settings.request_timeout) as client:
                yield client

    async def _request_token(self, grant: Dict[str, str]) -> Token:
        self._require_configuration()

        form = dict(grant)
        form["client_id"] = self.settings.azure_client_id
        form["scope"] = " ".join(self.settings.scopes)
        if self.settings.azure_client_secret:
            form["client_secret"] = self.settings.azure_client_secret

        grant_type = form["grant_type"]
        issued_at = self._clock()

        logger.debug("Requesting token", grant_type=grant_type, endpoint=self.token_endpoint)

        try:
            async with self._session() as client:
                response = await client.post(
                    self.token_endpoint,
                    data=form,
                    headers={"Accept": "application/json"},
                    timeout=self.settings.request_timeout,
                )
        except httpx.InvalidURL as e:
            raise InvalidConfigurationError(f"Invalid token endpoint: {e}") from e
        except httpx.TimeoutException as e:
            logger.error("Token request timed out", grant_type=grant_type)
            raise TransportError(f"Token endpoint timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Token request failed", grant_type=grant_type, error=str(e))
            raise TransportError(f"Token endpoint unreachable: {e}") from e

        if response.status_code != 200:
            details = parse_error_details(response.content)
            logger.error(
                "Token endpoint rejected request",
                grant_type=grant_type,
                status_code=response.status_code,
                error_code=details.get("code"),
            )
            raise UnauthenticatedError(
                f"Token request ({grant_type}) failed with HTTP {response.status_code}",
                details,
                status_code=response.status_code,
            )

        try:
            payload = TokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise DecodeFailureError(
                f"Invalid token response: {describe_validation_error(e)}"
            ) from e

        token = payload.to_token(issued_at)
        self._store_token(token)
        return token
