"""UserInfo endpoint use case."""

from typing import Any

from tollgate.application.usecase.base import BaseUseCase, context_error
from tollgate.domain.model.context import SessionRequest
from tollgate.domain.model.response import OAuthError
from tollgate.domain.provider import SessionIdentityProvider
from tollgate.domain.service import ClaimMapperRegistry
from tollgate.domain.service.claim_mapper import JWT_FORMAT
from tollgate.domain.value import OAuthErrorType


class GetUserInfoUseCase(BaseUseCase):
    """Claims of the current session principal in JWT claim names."""

    def __init__(
        self,
        session_identity_provider: SessionIdentityProvider,
        claim_mapper_registry: ClaimMapperRegistry,
    ) -> None:
        self.session_identity_provider = session_identity_provider
        self.claim_mapper_registry = claim_mapper_registry

    async def execute(self, request: SessionRequest) -> dict[str, Any] | OAuthError:
        """Map the session principal's claims, keeping the first value of each.

        Returns:
            Claim name to value, or ``invalid_request`` without a session
        """
        context = request
        principal = (
            await self.session_identity_provider.authenticate(context.session)
            if context.session
            else None
        )
        if principal is None:
            context.fail(OAuthErrorType.INVALID_REQUEST, "no authenticated session")
            return context_error(context)

        claims = self.claim_mapper_registry.map_to_external(JWT_FORMAT, principal.claims)
        return {
            name: value[0] if isinstance(value, list) else value
            for name, value in claims.items()
        }
