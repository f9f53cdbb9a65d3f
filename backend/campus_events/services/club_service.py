"""
Club directory and admin moderation of club accounts.
"""

from campus_events.core.exceptions import NotFound
from campus_events.core.logging import get_logger
from campus_events.core.security import Identity
from campus_events.models.account import ROLE_CLUB, Account
from campus_events.models.audit_log import ACTION_DELETE_CLUB, ACTION_UPDATE_CLUB, TARGET_CLUB
from campus_events.repositories.account_repository import AccountRepository
from campus_events.repositories.event_repository import EventRepository
from campus_events.schemas.account import ClubUpdate
from campus_events.services.audit_service import AuditService

logger = get_logger(__name__)


class ClubService:
    def __init__(self, accounts: AccountRepository, events: EventRepository, audit: AuditService):
        self.accounts = accounts
        self.events = events
        self.audit = audit

    async def list_clubs(self) -> list[Account]:
        return await self.accounts.list_by_role(ROLE_CLUB)

    async def admin_update_club(self, admin: Identity, club_id: int, patch: ClubUpdate) -> Account:
        club = await self.accounts.get(club_id, role=ROLE_CLUB)
        if club is None:
            raise NotFound("Club not found")
        club = await self.accounts.apply_changes(club, patch.model_dump(exclude_unset=True))
        await self.audit.record(ACTION_UPDATE_CLUB, TARGET_CLUB, club_id, admin)
        await self.accounts.commit()
        return club

    async def admin_delete_club(self, admin: Identity, club_id: int) -> None:
        """
        Removes the club together with its events and their ledgers.

        A club may also hold tickets to other clubs' events (when purchases
        are open to every role); those counters are decremented before the
        cascade drops the club's ledger rows.
        """
        if await self.accounts.get(club_id, role=ROLE_CLUB) is None:
            raise NotFound("Club not found")
        released = await self.events.release_purchases_by_buyer(club_id)
        await self.accounts.delete(club_id)
        await self.audit.record(ACTION_DELETE_CLUB, TARGET_CLUB, club_id, admin)
        await self.accounts.commit()
        logger.info("club_deleted", club_id=club_id, admin_id=admin.subject_id, tickets_released=released)
