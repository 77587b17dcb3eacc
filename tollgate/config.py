"""Application configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tollgate.domain.value import policies
from tollgate.domain.value.types import SignatureAlgorithm, TokenType


class SignatureSettings(BaseModel):
    """A single configured signing key."""

    key_name: str
    algorithm: SignatureAlgorithm = SignatureAlgorithm.HS256

    # HS256 only
    secret: str | None = None

    # RS256/RS512 only: PEM certificate and its private key
    certificate_path: Path | None = None
    private_key_path: Path | None = None


class OAuthSettings(BaseModel):
    """OAuth / OpenID Connect server configuration."""

    # Set by Settings validator from api.base_url unless overridden
    issuer_name: str | None = None

    token_type: TokenType = TokenType.BEARER

    # When False, client_credentials requires an authenticated device
    allow_client_only_grant: bool = False

    # Abbreviate unrestricted-all scope OIDs in issued tokens
    encode_scopes: bool = False

    # Preferred signing key (after the per-application SA.{appid} key)
    jwt_signing_key: str | None = "jwtsign"

    authorization_code_validity_seconds: int = 60

    # Fernet key for authorization codes and the SSO cookie.
    # When unset an ephemeral key is generated at startup.
    symmetric_key: str | None = None

    cookie_name: str = "_a"
    token_clock_skew_seconds: int = 5
    scopes_supported: list[str] = []

    # Optional folder with login.html and static content
    login_asset_path: Path | None = None

    # Mount prefix for all OAuth endpoints
    path_prefix: str = "/auth"


class SecuritySettings(BaseModel):
    """Key material and security policy configuration."""

    signatures: list[SignatureSettings] = [
        SignatureSettings(
            key_name="default",
            algorithm=SignatureAlgorithm.HS256,
            secret="CHANGE_ME_IN_PRODUCTION",
        )
    ]

    # Additional certificates published for the system identity
    signing_certificate_paths: list[Path] = []

    authentication_cookie_validity_seconds: int = 3600

    # Security id of the distinguished system application
    system_application_sid: str = "00000000-0000-0000-0000-000000000002"


class PolicySettings(BaseModel):
    """Policy identifiers demanded by the grant flows."""

    unrestricted_all: str = policies.UNRESTRICTED_ALL
    login_password_only: str = policies.LOGIN_PASSWORD_ONLY
    override_policy_permission: str = policies.OVERRIDE_POLICY_PERMISSION
    client_credentials_flow: str = policies.OAUTH_CLIENT_CREDENTIALS_FLOW
    client_credentials_flow_without_device: str = (
        policies.OAUTH_CLIENT_CREDENTIALS_FLOW_WITHOUT_DEVICE
    )
    password_flow: str = policies.OAUTH_PASSWORD_FLOW
    password_flow_without_device: str = policies.OAUTH_PASSWORD_FLOW_WITHOUT_DEVICE
    code_flow: str = policies.OAUTH_CODE_FLOW
    code_flow_without_device: str = policies.OAUTH_CODE_FLOW_WITHOUT_DEVICE
    reset_flow: str = policies.OAUTH_RESET_FLOW
    reset_flow_without_device: str = policies.OAUTH_RESET_FLOW_WITHOUT_DEVICE


class SessionSettings(BaseModel):
    """In-memory session store configuration."""

    lifetime_seconds: int = 3600
    refresh_lifetime_seconds: int = 86400

    # Claims a session principal must carry; missing ones reject establishment
    required_claims: list[str] = []


class APISettings(BaseModel):
    """API configuration."""

    host: str
    port: int
    protocol: Literal["http", "https"]

    @computed_field
    @property
    def base_url(self) -> str:
        """Construct base URL from host.

        In development: http://localhost:8000
        In production: https://auth.example.org
        """
        if self.host == "localhost":
            return f"{self.protocol}://{self.host}:{self.port}"
        else:
            # Production uses standard ports (80/443)
            return f"{self.protocol}://{self.host}"


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # If None, sends when a token is present, otherwise console-only
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override, nested sections use ``__``:

    Development (default):
        HOST=localhost
        PORT=8000
        -> Issuer: http://localhost:8000/auth

    Production:
        HOST=auth.example.org
        ENVIRONMENT=production
        OAUTH__SYMMETRIC_KEY=<fernet key>
        OAUTH__TOKEN_TYPE=urn:ietf:params:oauth:token-type:jwt
        -> Issuer: https://auth.example.org/auth
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows OAUTH__TOKEN_TYPE syntax
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    host: str = "localhost"
    port: int = 8000

    # Nested settings
    oauth: OAuthSettings = OAuthSettings()
    security: SecuritySettings = SecuritySettings()
    policies: PolicySettings = PolicySettings()
    session: SessionSettings = SessionSettings()
    api: APISettings = APISettings(
        host="localhost", port=8000, protocol="http"
    )  # Overwritten in validator
    observability: ObservabilitySettings = ObservabilitySettings()

    @model_validator(mode="after")
    def initialize_api_settings(self) -> "Settings":
        """Initialize API settings and the issuer from host and environment."""
        protocol: Literal["http", "https"] = (
            "http" if self.environment in ("test", "development") else "https"
        )

        self.api = APISettings(host=self.host, port=self.port, protocol=protocol)

        if not self.oauth.issuer_name:
            self.oauth.issuer_name = f"{self.api.base_url}{self.oauth.path_prefix}"

        return self

    @property
    def endpoint_base_url(self) -> str:
        """Absolute URL the OAuth endpoints are mounted under."""
        return f"{self.api.base_url}{self.oauth.path_prefix}"
