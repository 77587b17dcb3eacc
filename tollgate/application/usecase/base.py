"""Base use case."""

from abc import ABC, abstractmethod
from typing import Any

from tollgate.domain.model.context import RequestContext
from tollgate.domain.model.response import OAuthError
from tollgate.domain.value import OAuthErrorType


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services."""

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass


def context_error(context: RequestContext, state: str | None = None) -> OAuthError:
    """Render the error recorded on a context."""
    return OAuthError(
        error=context.error_type or OAuthErrorType.UNSPECIFIED_ERROR,
        error_description=context.error_message,
        error_detail=context.error_detail,
        state=state,
    )
