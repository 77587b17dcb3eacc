"""Protocol response documents."""

from typing import Any

from pydantic import BaseModel

from tollgate.domain.value import OAuthErrorType


class OAuthError(BaseModel):
    """Error object returned by every OAuth endpoint."""

    error: OAuthErrorType
    error_description: str | None = None
    error_detail: str | None = None
    state: str | None = None
    data: dict[str, Any] | None = None


class OAuthTokenResponse(BaseModel):
    """Token response for the token and session endpoints."""

    access_token: str
    id_token: str | None = None
    token_type: str
    expires_in: int
    refresh_token: str | None = None
    nonce: str | None = None


class JsonWebKeySet(BaseModel):
    """Published verification keys."""

    keys: list[dict[str, Any]]


class DiscoveryDocument(BaseModel):
    """OpenID Connect discovery metadata."""

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: str
    end_session_endpoint: str
    jwks_uri: str
    grant_types_supported: list[str]
    response_types_supported: list[str]
    response_modes_supported: list[str]
    id_token_signing_alg_values_supported: list[str]
    scopes_supported: list[str]
    subject_types_supported: list[str]
    token_endpoint_auth_methods_supported: list[str]
