"""
Account store keyed by (role, email).
"""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_events.models.account import Account


class AccountRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, account_id: int, role: Optional[str] = None) -> Optional[Account]:
        query = select(Account).where(Account.id == account_id)
        if role is not None:
            query = query.where(Account.role == role)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, role: str, email: str) -> Optional[Account]:
        result = await self.db.execute(
            select(Account).where(Account.role == role, Account.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def add(self, account: Account) -> Account:
        self.db.add(account)
        await self.db.flush()
        await self.db.refresh(account)
        return account

    async def apply_changes(self, account: Account, changes: dict) -> Account:
        for field, value in changes.items():
            setattr(account, field, value)
        await self.db.flush()
        await self.db.refresh(account)
        return account

    async def list_by_role(self, role: str) -> list[Account]:
        result = await self.db.execute(
            select(Account).where(Account.role == role).order_by(Account.name.asc(), Account.id.asc())
        )
        return list(result.scalars().all())

    async def delete(self, account_id: int) -> bool:
        """Hard delete; owned events and ledger rows cascade."""
        result = await self.db.execute(delete(Account).where(Account.id == account_id))
        return result.rowcount > 0

    async def commit(self) -> None:
        await self.db.commit()
