"""
Admin audit log: one entry per administrative mutation, written in the
same transaction as the mutation it describes.
"""

import math

from campus_events.core.exceptions import ValidationFailed
from campus_events.core.logging import get_logger
from campus_events.core.metrics import record_admin_action
from campus_events.core.security import Identity
from campus_events.models.audit_log import TARGET_CLUB, TARGET_EVENT, AuditLogEntry
from campus_events.repositories.audit_repository import AuditLogRepository

logger = get_logger(__name__)

LOGS_PAGE_SIZE = 10
TARGET_TYPES = (TARGET_EVENT, TARGET_CLUB)


class AuditService:
    def __init__(self, logs: AuditLogRepository):
        self.logs = logs

    async def record(self, action: str, target_type: str, target_id: int, admin: Identity) -> AuditLogEntry:
        entry = await self.logs.append(
            AuditLogEntry(
                action=action,
                target_type=target_type,
                target_id=target_id,
                actor_admin_id=admin.subject_id,
            )
        )
        record_admin_action(action)
        logger.info(
            "admin_action_logged",
            action=action,
            target_type=target_type,
            target_id=target_id,
            admin_id=admin.subject_id,
        )
        return entry

    async def list_logs(self, page: int = 1) -> tuple[list[AuditLogEntry], int, int]:
        """Return (entries, total_pages, current_page), newest first."""
        page = max(page, 1)
        total = await self.logs.count()
        entries = await self.logs.list_page((page - 1) * LOGS_PAGE_SIZE, LOGS_PAGE_SIZE)
        return entries, math.ceil(total / LOGS_PAGE_SIZE), page

    async def target_activity(self, target_type: str, target_id: int) -> list[AuditLogEntry]:
        if target_type not in TARGET_TYPES:
            raise ValidationFailed(f"Invalid target type: {target_type}")
        return await self.logs.list_for_target(target_type, target_id)
