"""In-memory audit sink for testing."""

from tollgate.domain.model.audit import AuditEvent
from tollgate.domain.provider import AuditService


class InMemoryAuditService(AuditService):
    """Records audit events for inspection."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    async def send(self, event: AuditEvent) -> None:
        self.events.append(event)
