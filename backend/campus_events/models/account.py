"""
Account model shared by students, clubs and admins.

Keyed by (role, email): the same address may hold a student and a club
account, mirroring the separate sign-up flows. Role-specific profile
fields are nullable and only filled for the role that uses them.
"""

from sqlalchemy import CheckConstraint, Column, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin

ROLE_STUDENT = "student"
ROLE_CLUB = "club"
ROLE_ADMIN = "admin"


class Account(Base, TimestampMixin):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String(20), nullable=False)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Club profile
    description = Column(String(1000), nullable=True)
    image = Column(String(500), nullable=True)

    # Student profile
    course = Column(String(255), nullable=True)
    year = Column(Integer, nullable=True)

    events = relationship("Event", back_populates="club", lazy="raise", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint("role", "email", name="uq_accounts_role_email"),
        CheckConstraint("role IN ('student', 'club', 'admin')", name="check_account_role"),
        Index("ix_accounts_role_name", "role", "name"),
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, role={self.role}, email={self.email})>"
