"""
Append-only record of administrative mutations.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, utcnow

ACTION_UPDATE_EVENT = "UPDATE_EVENT"
ACTION_DELETE_EVENT = "DELETE_EVENT"
ACTION_UPDATE_CLUB = "UPDATE_CLUB"
ACTION_DELETE_CLUB = "DELETE_CLUB"

TARGET_EVENT = "event"
TARGET_CLUB = "club"


class AuditLogEntry(Base):
    __tablename__ = "admin_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String(50), nullable=False)
    target_type = Column(String(20), nullable=False)
    # No FK: the target is usually gone by the time the entry is read
    target_id = Column(Integer, nullable=False)
    actor_admin_id = Column(Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    admin = relationship("Account", lazy="selectin")

    __table_args__ = (
        Index("ix_admin_logs_timestamp", "timestamp"),
        Index("ix_admin_logs_target", "target_type", "target_id"),
    )

    def __repr__(self) -> str:
        return f"<AuditLogEntry(id={self.id}, action={self.action}, target={self.target_type}:{self.target_id})>"
