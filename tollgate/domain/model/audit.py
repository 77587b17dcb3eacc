"""Audit event model."""

from datetime import datetime

from tollgate.domain.model.common import DomainModel
from tollgate.domain.value import AuditAction, AuditOutcome


class AuditEvent(DomainModel):
    """A security audit record handed to the audit service."""

    action: AuditAction
    outcome: AuditOutcome
    timestamp: datetime
    principal_names: tuple[str, ...] = ()
    session_id: str | None = None
    remote_ip: str | None = None
