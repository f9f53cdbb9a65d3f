from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.models.audit_log import AuditLogEntry


class AuditLogRepository:
    """Append-only log store: entries are never updated or deleted."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(AuditLogEntry))
        return result.scalar_one()

    async def list_page(self, offset: int, limit: int) -> list[AuditLogEntry]:
        result = await self.db.execute(
            select(AuditLogEntry)
            .order_by(AuditLogEntry.timestamp.desc(), AuditLogEntry.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_for_target(self, target_type: str, target_id: int) -> list[AuditLogEntry]:
        result = await self.db.execute(
            select(AuditLogEntry)
            .where(AuditLogEntry.target_type == target_type, AuditLogEntry.target_id == target_id)
            .order_by(AuditLogEntry.timestamp.desc(), AuditLogEntry.id.desc())
        )
        return list(result.scalars().all())
