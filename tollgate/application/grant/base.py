"""Grant handler contract and registry."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import ClassVar

import logfire

from tollgate.domain.model.context import TokenRequest
from tollgate.domain.model.principal import ClaimsPrincipal
from tollgate.domain.provider import PolicyEnforcementService
from tollgate.domain.value import OAuthErrorType, PolicyDecision


class GrantHandler(ABC):
    """Handles one or more OAuth grant types at the token endpoint.

    On success a handler populates the user or application principal of
    the context and either assigns ``context.session`` or leaves it None
    so the token endpoint establishes the session. On failure it records
    the error on the context and returns False.
    """

    grant_types: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    async def handle(self, context: TokenRequest) -> bool:
        pass


async def demand_policy(
    policy_enforcement: PolicyEnforcementService,
    context: TokenRequest,
    policy_id: str,
    principal: ClaimsPrincipal | None,
) -> bool:
    """Demand a policy, recording ``unauthorized_client`` on denial.

    A missing principal is skipped: there is nothing to demand against.
    """
    if principal is None:
        return True
    decision = await policy_enforcement.demand(policy_id, principal)
    if decision == PolicyDecision.GRANT:
        return True
    return context.fail(
        OAuthErrorType.UNAUTHORIZED_CLIENT,
        f"{principal.identity.name} lacks policy {policy_id}",
    )


def normalize_grant_type(grant_type: str | None) -> str:
    return (grant_type or "").strip().lower()


class GrantHandlerRegistry:
    """Grant type to handler map, built once at startup."""

    def __init__(self, handlers: Iterable[GrantHandler]) -> None:
        self._handlers: dict[str, GrantHandler] = {}
        for handler in handlers:
            for grant_type in handler.grant_types:
                key = normalize_grant_type(grant_type)
                if not key:
                    continue
                if key in self._handlers:
                    logfire.error(
                        "Duplicate grant handler ignored",
                        grant_type=key,
                        handler=type(handler).__name__,
                        registered=type(self._handlers[key]).__name__,
                    )
                    continue
                self._handlers[key] = handler

    def get(self, grant_type: str | None) -> GrantHandler | None:
        return self._handlers.get(normalize_grant_type(grant_type))

    def __contains__(self, grant_type: str) -> bool:
        return normalize_grant_type(grant_type) in self._handlers

    @property
    def grant_types(self) -> list[str]:
        return list(self._handlers)
