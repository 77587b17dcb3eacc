"""Audit sink providers."""

from dishka import Scope, provide

from tollgate.adapter.audit import LogfireAuditService
from tollgate.domain.provider import AuditService
from tollgate.util.di.base import ProviderBase


class AuditProvider(ProviderBase):
    """Audit component base."""

    __mock_component__ = "audit"


class ProdAuditProvider(AuditProvider):
    """Production audit sink writing to Logfire."""

    __is_mock__ = False

    scope = Scope.APP

    @provide
    def get_audit_service(self) -> AuditService:
        """Provide audit sink."""
        return LogfireAuditService()
