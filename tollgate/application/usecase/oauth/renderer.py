"""Authorization response renderers, one per response mode."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar
from urllib.parse import urlencode

import logfire
from jinja2 import Environment

from tollgate.domain.model.response import OAuthError
from tollgate.domain.value import ResponseMode


@dataclass
class AuthorizeResponse:
    """What the authorize endpoint hands back to the HTTP layer."""

    status_code: int = 200
    location: str | None = None
    content: bytes | None = None
    media_type: str = "text/html"
    headers: dict[str, str] = field(default_factory=dict)
    cookie_value: str | None = None
    cookie_expires: datetime | None = None
    error: OAuthError | None = None


class ResponseModeRenderer(ABC):
    """Returns authorization response parameters to the client."""

    response_mode: ClassVar[str]

    @abstractmethod
    def render(self, redirect_uri: str, parameters: dict[str, str]) -> AuthorizeResponse:
        pass


def _present(parameters: dict[str, str | None]) -> dict[str, str]:
    return {k: v for k, v in parameters.items() if v is not None}


class QueryResponseRenderer(ResponseModeRenderer):
    """Redirect with the parameters in the query string."""

    response_mode = ResponseMode.QUERY.value

    def render(self, redirect_uri: str, parameters: dict[str, str]) -> AuthorizeResponse:
        separator = "&" if "?" in redirect_uri else "?"
        return AuthorizeResponse(
            status_code=302,
            location=f"{redirect_uri}{separator}{urlencode(_present(parameters))}",
        )


class FragmentResponseRenderer(ResponseModeRenderer):
    """Redirect with the parameters in the URI fragment."""

    response_mode = ResponseMode.FRAGMENT.value

    def render(self, redirect_uri: str, parameters: dict[str, str]) -> AuthorizeResponse:
        return AuthorizeResponse(
            status_code=302,
            location=f"{redirect_uri}#{urlencode(_present(parameters))}",
        )


class FormPostResponseRenderer(ResponseModeRenderer):
    """Auto-submitting HTML form posting the parameters to the client."""

    response_mode = ResponseMode.FORM_POST.value
    template_name = "form_post.html"

    def __init__(self, environment: Environment) -> None:
        self.environment = environment

    def render(self, redirect_uri: str, parameters: dict[str, str]) -> AuthorizeResponse:
        page = self.environment.get_template(self.template_name).render(
            action=redirect_uri, parameters=_present(parameters)
        )
        return AuthorizeResponse(
            content=page.encode("utf-8"),
            headers={"Cache-Control": "no-store"},
        )


class ResponseModeRegistry:
    """Response mode to renderer map, built once at startup."""

    def __init__(self, renderers: Iterable[ResponseModeRenderer]) -> None:
        self._renderers: dict[str, ResponseModeRenderer] = {}
        for renderer in renderers:
            key = renderer.response_mode.lower()
            if key in self._renderers:
                logfire.error("Duplicate response mode renderer ignored", response_mode=key)
                continue
            self._renderers[key] = renderer

    def get(self, response_mode: str) -> ResponseModeRenderer | None:
        return self._renderers.get(response_mode.strip().lower())

    @property
    def response_modes(self) -> list[str]:
        return list(self._renderers)
