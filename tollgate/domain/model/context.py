"""Per-request state carried through the OAuth endpoint pipelines.

Each endpoint owns its own context type. Contexts are created for a
single request and mutated only by the stage currently processing it.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from uuid import uuid4

from tollgate.domain.model.principal import Claim, ClaimsIdentity, ClaimsPrincipal
from tollgate.domain.model.session import Session
from tollgate.domain.model.token import SecurityTokenDescriptor
from tollgate.domain.value import FormFields, IdentityKind, OAuthErrorType


def _field(form: dict[str, str], name: str) -> str | None:
    value = form.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(kw_only=True)
class RequestContext:
    """Fields shared by every endpoint pipeline."""

    form: dict[str, str] = field(default_factory=dict)
    trace_id: str = field(default_factory=lambda: uuid4().hex)
    remote_ip: str | None = None
    client_id: str | None = None
    nonce: str | None = None

    # Principal authenticated by request middleware, if any
    authenticated_principal: ClaimsPrincipal | None = None

    # Client secret captured for the symmetric signing fallback
    symmetric_secret: str | None = None

    device_identity: ClaimsIdentity | None = None
    device_principal: ClaimsPrincipal | None = None
    application_identity: ClaimsIdentity | None = None
    application_principal: ClaimsPrincipal | None = None
    user_identity: ClaimsIdentity | None = None
    user_principal: ClaimsPrincipal | None = None

    error_type: OAuthErrorType | None = None
    error_message: str | None = None
    error_detail: str | None = None

    session: Session | None = None
    descriptor: SecurityTokenDescriptor | None = None
    access_token: str | None = None
    id_token: str | None = None
    refresh_token: str | None = None
    token_type: str | None = None
    expires_in: timedelta | None = None

    def fail(self, error_type: OAuthErrorType, message: str) -> bool:
        """Record an error on the context. Always returns False."""
        self.error_type = error_type
        self.error_message = message
        return False

    @property
    def has_error(self) -> bool:
        return self.error_type is not None

    def get_device_identity(self) -> ClaimsIdentity | None:
        if self.device_identity is not None:
            return self.device_identity
        if self.device_principal is not None:
            return self.device_principal.identity
        return None

    def get_application_identity(self) -> ClaimsIdentity | None:
        if self.application_identity is not None:
            return self.application_identity
        if self.application_principal is not None:
            return self.application_principal.identity
        return None

    def get_user_identity(self) -> ClaimsIdentity | None:
        if self.user_identity is not None:
            return self.user_identity
        if self.user_principal is not None:
            return self.user_principal.identity
        return None

    def get_primary_identity(self) -> ClaimsIdentity | None:
        """User, else application, else device identity."""
        return (
            self.get_user_identity()
            or self.get_application_identity()
            or self.get_device_identity()
        )

    def find_authenticated_identity(self, kind: IdentityKind) -> ClaimsIdentity | None:
        """Authenticated identity of the given kind from the middleware principal."""
        if self.authenticated_principal is None:
            return None
        identity = self.authenticated_principal.find_identity(kind)
        if identity is not None and identity.is_authenticated:
            return identity
        return None


@dataclass(kw_only=True)
class TokenRequest(RequestContext):
    """Token endpoint context."""

    grant_type: str | None = None
    scopes: list[str] = field(default_factory=list)
    client_secret: str | None = None
    code: str | None = None
    code_verifier: str | None = None
    refresh_token_value: str | None = None
    username: str | None = None
    password: str | None = None
    challenge: str | None = None
    challenge_response: str | None = None
    mfa_code: str | None = None
    ui_locales: str | None = None

    # Raw client claim header, base64 of "type=value;type=value"
    client_claim_header: str | None = None

    # Extra claims supplied by the client for session establishment
    additional_claims: list[Claim] = field(default_factory=list)

    @classmethod
    def from_form(cls, form: dict[str, str], **kwargs) -> "TokenRequest":
        scope = _field(form, FormFields.SCOPE)
        return cls(
            form=form,
            grant_type=_field(form, FormFields.GRANT_TYPE),
            scopes=scope.split() if scope else [],
            client_id=_field(form, FormFields.CLIENT_ID),
            client_secret=_field(form, FormFields.CLIENT_SECRET),
            code=_field(form, FormFields.CODE),
            code_verifier=_field(form, FormFields.CODE_VERIFIER),
            refresh_token_value=_field(form, FormFields.REFRESH_TOKEN),
            username=_field(form, FormFields.USERNAME),
            password=form.get(FormFields.PASSWORD),
            challenge=_field(form, FormFields.CHALLENGE),
            challenge_response=form.get(FormFields.CHALLENGE_RESPONSE),
            mfa_code=_field(form, FormFields.MFA_CODE),
            ui_locales=_field(form, FormFields.UI_LOCALES),
            nonce=_field(form, FormFields.NONCE),
            **kwargs,
        )


@dataclass(kw_only=True)
class AuthorizeRequest(RequestContext):
    """Authorize endpoint context."""

    response_type: str | None = None
    response_type_supplied: bool = False
    response_mode: str | None = None
    redirect_uri: str | None = None
    scope: str | None = None
    state: str | None = None
    prompt: str | None = None
    login_hint: str | None = None
    username: str | None = None
    password: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    ui_locales: str | None = None

    # Raw SSO cookie presented by the browser
    cookie_value: str | None = None

    # Outputs
    authorization_code: str | None = None
    login_error_message: str | None = None

    @classmethod
    def from_form(cls, form: dict[str, str], **kwargs) -> "AuthorizeRequest":
        return cls(
            form=form,
            client_id=_field(form, FormFields.CLIENT_ID),
            response_type=_field(form, FormFields.RESPONSE_TYPE),
            response_type_supplied=FormFields.RESPONSE_TYPE in form,
            response_mode=_field(form, FormFields.RESPONSE_MODE),
            redirect_uri=_field(form, FormFields.REDIRECT_URI),
            scope=_field(form, FormFields.SCOPE),
            state=form.get(FormFields.STATE),
            nonce=_field(form, FormFields.NONCE),
            prompt=_field(form, FormFields.PROMPT),
            login_hint=_field(form, FormFields.LOGIN_HINT),
            username=_field(form, FormFields.USERNAME),
            password=form.get(FormFields.PASSWORD),
            code_challenge=_field(form, FormFields.CODE_CHALLENGE),
            code_challenge_method=_field(form, FormFields.CODE_CHALLENGE_METHOD),
            ui_locales=_field(form, FormFields.UI_LOCALES),
            **kwargs,
        )


@dataclass(kw_only=True)
class SessionRequest(RequestContext):
    """Session and userinfo endpoint context."""


@dataclass(kw_only=True)
class SignoutRequest(RequestContext):
    """Signout endpoint context."""

    id_token_hint: str | None = None
    logout_hint: str | None = None
    post_logout_redirect_uri: str | None = None

    # Confidential clients sign id tokens with this secret
    client_secret: str | None = None

    # Raw SSO cookie presented by the browser
    cookie_value: str | None = None

    abandoned_sessions: list[Session] = field(default_factory=list)

    @classmethod
    def from_form(cls, form: dict[str, str], **kwargs) -> "SignoutRequest":
        return cls(
            form=form,
            client_id=_field(form, FormFields.CLIENT_ID),
            id_token_hint=_field(form, FormFields.ID_TOKEN_HINT),
            logout_hint=_field(form, FormFields.LOGOUT_HINT),
            post_logout_redirect_uri=_field(form, FormFields.POST_LOGOUT_REDIRECT_URI),
            client_secret=_field(form, FormFields.CLIENT_SECRET),
            **kwargs,
        )
