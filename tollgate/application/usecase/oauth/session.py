"""Session endpoint use case."""

import logfire

from tollgate.application.usecase.base import BaseUseCase, context_error
from tollgate.domain.model.context import SessionRequest
from tollgate.domain.model.response import OAuthError, OAuthTokenResponse
from tollgate.domain.service import TokenService
from tollgate.domain.value import OAuthErrorType


class GetSessionUseCase(BaseUseCase):
    """Re-issues the token response of the caller's current session."""

    def __init__(self, token_service: TokenService) -> None:
        self.token_service = token_service

    async def execute(self, request: SessionRequest) -> OAuthTokenResponse | OAuthError:
        context = request
        if context.session is None:
            context.fail(OAuthErrorType.INVALID_REQUEST, "no authenticated session")
            return context_error(context)

        with logfire.span("session_endpoint", trace_id=context.trace_id):
            await self.token_service.build_descriptor(context)
            self.token_service.mint_tokens(context)
            return self.token_service.create_token_response(context)
