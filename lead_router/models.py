from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def utcnow() -> datetime:
    # naive UTC, stored the same way on SQLite and Postgres
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Agent(Base):
    __tablename__ = "agents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)

    # Routing address: the agent's WhatsApp number
    wa_number = Column(String, nullable=False, unique=True)

    # Sender override (WhatsApp phone number id)
    phone_number_id = Column(String, nullable=True)

    active = Column(Boolean, nullable=False, default=True)

    # NULL = never assigned, first in the rotation
    last_assigned_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    assignments = relationship("Assignment", back_populates="agent")

    __table_args__ = (
        Index("idx_agents_active", "active"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "wa_number": self.wa_number,
            "phone_number_id": self.phone_number_id,
            "active": bool(self.active),
            "last_assigned_at": _iso(self.last_assigned_at),
            "created_at": _iso(self.created_at),
        }

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "wa_number": self.wa_number,
            "phone_number_id": self.phone_number_id,
        }


class Assignment(Base):
    """One row per inbound lead message; history is append-only."""

    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)

    lead_phone = Column(String, nullable=False)
    lead_name = Column(String, nullable=True)
    agent_id = Column(Integer, ForeignKey("agents.id"), nullable=False)
    message_text = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    # NULL = not attempted yet
    notification_sent = Column(Boolean, nullable=True)
    notification_error = Column(Text, nullable=True)

    agent = relationship("Agent", back_populates="assignments")

    __table_args__ = (
        Index("idx_assignments_lead_phone", "lead_phone"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "lead_phone": self.lead_phone,
            "lead_name": self.lead_name,
            "agent_id": self.agent_id,
            "message_text": self.message_text,
            "created_at": _iso(self.created_at),
            "notification_sent": self.notification_sent,
            "notification_error": self.notification_error,
        }


def _iso(value):
    return value.isoformat() if value is not None else None
