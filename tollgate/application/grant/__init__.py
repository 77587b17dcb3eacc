"""Token endpoint grant handlers."""

from .authorization_code import AuthorizationCodeGrantHandler
from .base import GrantHandler, GrantHandlerRegistry, demand_policy
from .client_credentials import ClientCredentialsGrantHandler
from .password import PasswordGrantHandler
from .password_reset import PasswordResetGrantHandler
from .refresh_token import RefreshTokenGrantHandler

__all__ = [
    "AuthorizationCodeGrantHandler",
    "ClientCredentialsGrantHandler",
    "GrantHandler",
    "GrantHandlerRegistry",
    "PasswordGrantHandler",
    "PasswordResetGrantHandler",
    "RefreshTokenGrantHandler",
    "demand_policy",
]
