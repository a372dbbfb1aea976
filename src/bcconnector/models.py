"""
Wire and credential models

Token records, OAuth token responses, OData collection envelopes and error bodies.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Token(BaseModel):
    """Access/refresh token pair owned by the TokenStore"""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: datetime

    def is_fresh(self, now: datetime, skew: timedelta = timedelta(0)) -> bool:
        return self.expires_at - skew > now


class TokenResponse(BaseModel):
    """Token endpoint response body"""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_token: Optional[str] = None

    def to_token(self, issued_at: datetime) -> Token:
        return Token(
            access_token=self.access_token,
            refresh_token=self.refresh_token or None,
            expires_at=issued_at + timedelta(seconds=self.expires_in),
        )


class Envelope(BaseModel, Generic[T]):
    """One page of an OData collection response"""

    model_config = ConfigDict(populate_by_name=True)

    context: str = Field(default="", alias="@odata.context")
    value: List[T]
    next_link: Optional[str] = Field(default=None, alias="@odata.nextLink")


class ODataErrorDetail(BaseModel):
    code: Optional[str] = None
    message: Optional[str] = None


class ODataErrorBody(BaseModel):
    """Business Central error body: {"error": {"code": ..., "message": ...}}"""

    error: ODataErrorDetail


class OAuthErrorBody(BaseModel):
    """Entra ID token endpoint error body"""

    error: str
    error_description: Optional[str] = None
    error_codes: Optional[List[int]] = None
    correlation_id: Optional[str] = None


def parse_error_details(body: bytes) -> Dict[str, Any]:
    """
    Best-effort decode of an error response body.

    Returns a dict with ``code`` and ``message`` keys when the body matches a
    known error shape, ``{"raw": <text>}`` for other non-empty bodies, and an
    empty dict otherwise.
    """
    if not body:
        return {}

    try:
        odata = ODataErrorBody.model_validate_json(body)
        return odata.error.model_dump(exclude_none=True)
    except ValidationError:
        pass

    try:
        oauth = OAuthErrorBody.model_validate_json(body)
        details: Dict[str, Any] = {"code": oauth.error}
        if oauth.error_description:
            details["message"] = oauth.error_description
        if oauth.correlation_id:
            details["correlation_id"] = oauth.correlation_id
        return details
    except ValidationError:
        pass

    try:
        text = body.decode("utf-8", errors="replace").strip()
    except AttributeError:
        text = str(body)
    return {"raw": text[:500]} if text else {}


def describe_validation_error(error: ValidationError) -> str:
    """Render a pydantic ValidationError as 'field.path: problem' pairs"""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "<root>"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)

