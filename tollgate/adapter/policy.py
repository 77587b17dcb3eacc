"""Claim-based policy decision point."""

import logging

from tollgate.domain.model.principal import ClaimsPrincipal
from tollgate.domain.provider import PolicyEnforcementService
from tollgate.domain.value import ClaimTypes, PolicyDecision

logger = logging.getLogger(__name__)


def policy_covers(granted: str, demanded: str) -> bool:
    """Whether a granted policy OID covers the demanded one.

    Policies are hierarchical, so ``1.2`` covers ``1.2`` and ``1.2.3``.
    """
    return demanded == granted or demanded.startswith(f"{granted}.")


class ClaimPolicyEnforcementService(PolicyEnforcementService):
    """Grants a policy when any identity of the principal carries it.

    Identity stores attach granted policies as claims, so the decision
    needs no further lookup.
    """

    async def demand(self, policy_id: str, principal: ClaimsPrincipal) -> PolicyDecision:
        for claim in principal.claims:
            if claim.type == ClaimTypes.GRANTED_POLICY and policy_covers(
                claim.value, policy_id
            ):
                return PolicyDecision.GRANT

        logger.info(f"Policy {policy_id} denied to {principal.identity.name}")
        return PolicyDecision.DENY
