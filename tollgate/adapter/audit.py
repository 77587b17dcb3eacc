"""Audit sink emitting events through Logfire."""

import logfire

from tollgate.domain.model.audit import AuditEvent
from tollgate.domain.provider import AuditService
from tollgate.domain.value import AuditOutcome


class LogfireAuditService(AuditService):
    """Writes audit events as structured Logfire records."""

    async def send(self, event: AuditEvent) -> None:
        attributes = {
            "audit_action": event.action.value,
            "audit_outcome": event.outcome.value,
            "principals": list(event.principal_names),
            "session_id": event.session_id,
            "remote_ip": event.remote_ip,
            "audit_timestamp": event.timestamp.isoformat(),
        }
        if event.outcome == AuditOutcome.SUCCESS:
            logfire.info("Audit {audit_action}", **attributes)
        else:
            logfire.warn("Audit {audit_action}", **attributes)
