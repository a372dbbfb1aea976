"""Authorization code sources and redirect/PKCE helpers."""

from __future__ import annotations

import asyncio
import base64
import hashlib
import os
import urllib.parse
import webbrowser
from typing import Callable, NamedTuple

import structlog

from .interface import IAuthorizationCodeSource

logger = structlog.get_logger(__name__)


class AuthorizationResponse(NamedTuple):
    code: str | None
    state: str | None
    error: str | None = None
    error_description: str | None = None


def _base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def generate_pkce() -> tuple[str, str]:
    """Return a (verifier, S256 challenge) pair."""
    verifier = _base64url(os.urandom(32))
    challenge = _base64url(hashlib.sha256(verifier.encode("utf-8")).digest())
    return verifier, challenge


def create_state() -> str:
    return _base64url(os.urandom(16))


def parse_authorization_response(raw: str) -> AuthorizationResponse:
    """Extract code/state/error from a redirect URL, a query string, or a bare code."""
    value = raw.strip()
    if not value:
        return AuthorizationResponse(None, None)

    parsed = urllib.parse.urlparse(value)
    query = parsed.query or parsed.fragment
    if not query and "=" in value and not parsed.scheme:
        query = value.lstrip("?")

    if query:
        qs = urllib.parse.parse_qs(query)
        code = qs.get("code", [None])[0]
        state = qs.get("state", [None])[0]
        error = qs.get("error", [None])[0]
        if code or error:
            return AuthorizationResponse(
                code, state, error, qs.get("error_description", [None])[0]
            )

    if parsed.scheme or "=" in value:
        # A URL or query string without a code
        return AuthorizationResponse(None, None)

    return AuthorizationResponse(value, None)


class ConsoleCodeSource(IAuthorizationCodeSource):
    """Opens the browser and reads the pasted redirect URL from the terminal."""

    def __init__(
        self,
        open_browser: bool = True,
        prompt: Callable[[str], str] = input,
        echo: Callable[[str], None] = print,
    ):
        self._open_browser = open_browser
        self._prompt = prompt
        self._echo = echo

    async def request_code(self, authorization_url: str) -> str:
        self._echo("Sign in to Business Central in your browser:")
        self._echo(authorization_url)
        if self._open_browser:
            try:
                webbrowser.open(authorization_url)
            except webbrowser.Error as e:
                logger.warning("Could not open browser", error=str(e))

        return await asyncio.to_thread(
            self._prompt, "Paste the URL you were redirected to (or the code): "
        )


class StaticCodeSource(IAuthorizationCodeSource):
    """Returns a pre-obtained redirect URL or code; records the URLs it was given."""

    def __init__(self, response: str):
        self.response = response
        self.requested_urls: list[str] = []

    async def request_code(self, authorization_url: str) -> str:
        self.requested_urls.append(authorization_url)
        return self.response
