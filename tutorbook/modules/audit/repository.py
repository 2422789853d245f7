"""Outbox repository layer."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from tutorbook.core.enums import OutboxStatusEnum
from tutorbook.modules.audit.models import OutboxEvent


class AuditRepository:
    """Write integration events in the same transaction as the change."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_outbox_event(
        self,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        payload: dict,
    ) -> OutboxEvent:
        event = OutboxEvent(
            aggregate_type=aggregate_type,
            aggregate_id=aggregate_id,
            event_type=event_type,
            payload=payload,
            status=OutboxStatusEnum.PENDING,
        )
        self.session.add(event)
        await self.session.flush()
        return event
