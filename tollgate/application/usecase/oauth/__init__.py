"""OAuth endpoint use cases."""

from .authorize import AuthorizeUseCase
from .metadata import GetDiscoveryDocumentUseCase, GetKeySetUseCase, GetLoginContentUseCase
from .renderer import (
    AuthorizeResponse,
    FormPostResponseRenderer,
    FragmentResponseRenderer,
    QueryResponseRenderer,
    ResponseModeRegistry,
    ResponseModeRenderer,
)
from .session import GetSessionUseCase
from .signout import SignoutHook, SignoutUseCase
from .token import TokenUseCase, parse_client_claims
from .userinfo import GetUserInfoUseCase

__all__ = [
    "AuthorizeResponse",
    "AuthorizeUseCase",
    "FormPostResponseRenderer",
    "FragmentResponseRenderer",
    "GetDiscoveryDocumentUseCase",
    "GetKeySetUseCase",
    "GetLoginContentUseCase",
    "GetSessionUseCase",
    "GetUserInfoUseCase",
    "QueryResponseRenderer",
    "ResponseModeRegistry",
    "ResponseModeRenderer",
    "SignoutHook",
    "SignoutUseCase",
    "TokenUseCase",
    "parse_client_claims",
]
