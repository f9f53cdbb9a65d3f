"""
Event model and its purchase ledger.

Key design decisions:
- `purchase_count` is denormalized for read efficiency (listings never load
  the ledger); it moves only in the same transaction as a ledger insert, or as the
  deletion of a buyer whose rows the cascade removes
- UNIQUE(event_id, buyer_id) on the ledger is the at-most-once guard for
  concurrent purchases by the same buyer
- `version` is bumped on every mutation of the row
- `owner_club_id` is set at creation and never updated
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from campus_events.db.base import Base, TimestampMixin, utcnow


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    venue = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    owner_club_id = Column(
        Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    purchase_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)

    club = relationship("Account", back_populates="events", lazy="selectin")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_event_price_non_negative"),
        CheckConstraint("purchase_count >= 0", name="check_event_purchase_count_non_negative"),
        Index("ix_events_date", "date"),
        Index("ix_events_owner_date", "owner_club_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, purchases={self.purchase_count})>"


class Purchase(Base):
    """One ledger entry: a buyer's ticket for an event."""

    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    purchased_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    buyer = relationship("Account", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("event_id", "buyer_id", name="uq_purchase_event_buyer"),
    )

    def __repr__(self) -> str:
        return f"<Purchase(id={self.id}, event={self.event_id}, buyer={self.buyer_id})>"
