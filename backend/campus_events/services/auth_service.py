"""
Account registration and login for students, clubs and admins.
"""

from typing import Optional

from campus_events.core.exceptions import AccountExists, Unauthenticated
from campus_events.core.logging import get_logger
from campus_events.core.security import TokenProvider, hash_password, verify_password
from campus_events.models.account import ROLE_ADMIN, ROLE_CLUB, ROLE_STUDENT, Account
from campus_events.repositories.account_repository import AccountRepository
from campus_events.schemas.account import ClubCreate, LoginRequest, StudentCreate

logger = get_logger(__name__)


class AuthService:
    def __init__(self, accounts: AccountRepository, tokens: TokenProvider):
        self.accounts = accounts
        self.tokens = tokens

    async def _ensure_new(self, role: str, email: str) -> None:
        if await self.accounts.get_by_email(role, email):
            logger.warning("registration_failed", reason="email_exists", role=role, email=email)
            raise AccountExists(f"{role.capitalize()} already exists")

    async def register_student(self, data: StudentCreate) -> tuple[Account, str]:
        await self._ensure_new(ROLE_STUDENT, data.email)
        account = await self.accounts.add(
            Account(
                role=ROLE_STUDENT,
                email=data.email,
                name=data.name,
                hashed_password=hash_password(data.password),
                course=data.course,
                year=data.year,
            )
        )
        logger.info("account_registered", account_id=account.id, role=ROLE_STUDENT)
        return account, self.tokens.issue(account.id, ROLE_STUDENT)

    async def register_club(self, data: ClubCreate) -> tuple[Account, str]:
        await self._ensure_new(ROLE_CLUB, data.email)
        account = await self.accounts.add(
            Account(
                role=ROLE_CLUB,
                email=data.email,
                name=data.name,
                hashed_password=hash_password(data.password),
                description=data.description,
                image=data.image,
            )
        )
        logger.info("account_registered", account_id=account.id, role=ROLE_CLUB)
        return account, self.tokens.issue(account.id, ROLE_CLUB)

    async def login(self, role: str, credentials: LoginRequest) -> tuple[Account, str]:
        """Return the account and a fresh token, or raise 401."""
        account = await self.accounts.get_by_email(role, credentials.email)
        if account is None or not verify_password(credentials.password, account.hashed_password):
            logger.warning("login_failed", role=role, email=credentials.email)
            raise Unauthenticated("Invalid credentials")

        logger.info("account_logged_in", account_id=account.id, role=role)
        return account, self.tokens.issue(account.id, role)

    async def ensure_admin(self, email: str, password: str, name: str = "Administrator") -> Optional[Account]:
        """Create the bootstrap admin once; an existing account is left as is."""
        email = email.lower()
        if await self.accounts.get_by_email(ROLE_ADMIN, email):
            return None
        account = await self.accounts.add(
            Account(
                role=ROLE_ADMIN,
                email=email,
                name=name,
                hashed_password=hash_password(password),
            )
        )
        logger.info("admin_bootstrapped", account_id=account.id)
        return account
