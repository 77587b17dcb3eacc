"""Session establishment, termination and auditing."""

from datetime import datetime, timezone

import logfire

from tollgate.config import PolicySettings
from tollgate.domain.error import SecuritySessionError
from tollgate.domain.model.audit import AuditEvent
from tollgate.domain.model.principal import Claim, ClaimsIdentity, ClaimsPrincipal
from tollgate.domain.model.session import Session
from tollgate.domain.provider import AuditService, SessionProvider
from tollgate.domain.value import AuditAction, AuditOutcome, ClaimTypes, IdentityKind
from tollgate.util.session import format_session_id

from .base import Service


class SessionService(Service):
    """Delegates session lifecycle to the session provider and audits it."""

    def __init__(
        self,
        session_provider: SessionProvider,
        audit_service: AuditService,
        policy_settings: PolicySettings,
    ) -> None:
        """Initialize session service.

        Args:
            session_provider: Session store collaborator
            audit_service: Audit sink
            policy_settings: Policy identifiers (override detection)
        """
        self.session_provider = session_provider
        self.audit_service = audit_service
        self.policy_settings = policy_settings

    async def establish_user_session(
        self,
        principal: ClaimsPrincipal,
        client_identity: ClaimsIdentity | None,
        device_identity: ClaimsIdentity | None,
        scopes: list[str],
        claims: list[Claim],
        remote_ip: str | None,
    ) -> Session | None:
        """Establish a session for a user acting through an application.

        Args:
            principal: Authenticated user principal (may already be composite)
            client_identity: Application identity to bind, if any
            device_identity: Device identity to bind, if any
            scopes: Requested scopes
            claims: Additional claims asserted by the client
            remote_ip: Caller address

        Returns:
            The session, or None if the session provider declined

        Raises:
            SecuritySessionError: If the session provider rejects the request
        """
        with logfire.span(
            "session_service.establish_user_session", user=principal.identity.name
        ):
            composite = self._compose(principal, client_identity, device_identity)
            return await self._establish(composite, scopes, claims, remote_ip)

    async def establish_client_session(
        self,
        principal: ClaimsPrincipal,
        device_principal: ClaimsPrincipal | None,
        scopes: list[str],
        claims: list[Claim],
        remote_ip: str | None,
    ) -> Session | None:
        """Establish a session for an application without a user.

        Raises:
            TypeError: If the principal is not an application principal
            SecuritySessionError: If the session provider rejects the request
        """
        if principal.identity.kind != IdentityKind.APPLICATION:
            raise TypeError("Client sessions require an application principal")

        with logfire.span(
            "session_service.establish_client_session", client=principal.identity.name
        ):
            device = device_principal.identity if device_principal else None
            composite = self._compose(principal, None, device)
            return await self._establish(composite, scopes, claims, remote_ip)

    async def abandon_session(
        self,
        session: Session,
        principal: ClaimsPrincipal | None,
        remote_ip: str | None,
    ) -> None:
        """Terminate a session and audit the stop."""
        with logfire.span(
            "session_service.abandon_session", session_id=format_session_id(session.id)
        ):
            await self.audit_session_stop(session, principal, remote_ip)
            await self.session_provider.abandon(session)

    async def audit_session_start(
        self,
        session: Session | None,
        principal: ClaimsPrincipal,
        remote_ip: str | None,
    ) -> None:
        await self._audit(AuditAction.SESSION_START, session, principal, remote_ip)

    async def audit_session_stop(
        self,
        session: Session,
        principal: ClaimsPrincipal | None,
        remote_ip: str | None,
    ) -> None:
        await self._audit(AuditAction.SESSION_STOP, session, principal, remote_ip)

    @staticmethod
    def _compose(
        principal: ClaimsPrincipal,
        client_identity: ClaimsIdentity | None,
        device_identity: ClaimsIdentity | None,
    ) -> ClaimsPrincipal:
        composite = principal
        for identity in (client_identity, device_identity):
            if identity is not None and not composite.has_identity(identity):
                composite = composite.with_identity(identity)
        return composite

    async def _establish(
        self,
        principal: ClaimsPrincipal,
        scopes: list[str],
        claims: list[Claim],
        remote_ip: str | None,
    ) -> Session | None:
        if claims:
            principal = principal.with_claims(
                c for c in claims if c not in principal.identity.claims
            )

        purpose = principal.find_first(ClaimTypes.PURPOSE_OF_USE)
        language = principal.find_first(ClaimTypes.LANGUAGE)
        override = principal.find_first(ClaimTypes.OVERRIDE)
        is_override = (
            self.policy_settings.override_policy_permission in scopes
            or (override is not None and override.value.lower() == "true")
        )

        try:
            session = await self.session_provider.establish(
                principal,
                remote_ip,
                is_override,
                purpose.value if purpose else None,
                scopes,
                language.value if language else None,
            )
        except SecuritySessionError:
            await self.audit_session_start(None, principal, remote_ip)
            raise

        await self.audit_session_start(session, principal, remote_ip)
        if session is None:
            logfire.warn("Session provider declined session", principal=principal.identity.name)
        else:
            logfire.info(
                "Session established",
                session_id=format_session_id(session.id),
                principal=principal.identity.name,
            )
        return session

    async def _audit(
        self,
        action: AuditAction,
        session: Session | None,
        principal: ClaimsPrincipal | None,
        remote_ip: str | None,
    ) -> None:
        await self.audit_service.send(
            AuditEvent(
                action=action,
                outcome=AuditOutcome.SUCCESS if session else AuditOutcome.MINOR_FAIL,
                timestamp=datetime.now(timezone.utc),
                principal_names=tuple(i.name for i in principal.identities)
                if principal
                else (),
                session_id=format_session_id(session.id) if session else None,
                remote_ip=remote_ip,
            )
        )
