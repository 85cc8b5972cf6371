import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lead_router.errors import DuplicateRoutingAddress
from lead_router.models import Agent, Assignment, utcnow

logger = logging.getLogger(__name__)


class LeadStore:
    """
    Persistence operations used by the lead router.

    Wraps a SQLAlchemy session. Mutating calls flush but do not commit,
    so the caller decides what forms one unit of work; the admin helpers
    (create_agent, set_agent_active) commit on their own.
    """

    def __init__(self, db: Session):
        self.db = db

    # -----------------------------
    # AGENTS
    # -----------------------------

    def list_active_agents(self) -> List[Agent]:
        # Rotation order: never-assigned first, then oldest turn, then id
        stmt = (
            select(Agent)
            .where(Agent.active.is_(True))
            .order_by(
                Agent.last_assigned_at.is_(None).desc(),
                Agent.last_assigned_at.asc(),
                Agent.id.asc(),
            )
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_agents(self) -> List[Agent]:
        return list(self.db.execute(select(Agent).order_by(Agent.id)).scalars().all())

    def get_agent(self, agent_id: int) -> Optional[Agent]:
        return self.db.get(Agent, agent_id)

    def get_agent_by_wa_number(self, wa_number: str) -> Optional[Agent]:
        stmt = select(Agent).where(Agent.wa_number == wa_number)
        return self.db.execute(stmt).scalars().first()

    def create_agent(
        self,
        name: str,
        wa_number: str,
        phone_number_id: Optional[str] = None,
    ) -> Agent:

        agent = Agent(
            name=name,
            wa_number=wa_number,
            phone_number_id=phone_number_id or None,
            active=True,
        )
        self.db.add(agent)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.get_agent_by_wa_number(wa_number) is not None:
                raise DuplicateRoutingAddress(wa_number)
            raise

        self.db.refresh(agent)
        logger.info("Agent created | id=%s name=%s wa_number=%s", agent.id, name, wa_number)
        return agent

    def set_agent_active(self, agent_id: int, active: bool) -> bool:
        result = self.db.execute(
            update(Agent).where(Agent.id == agent_id).values(active=bool(active))
        )
        self.db.commit()
        return result.rowcount > 0

    def touch_agent_last_assigned(self, agent_id: int) -> None:
        now = utcnow()

        # Keep rotation order strict on clocks with coarse resolution
        latest = self.db.execute(select(func.max(Agent.last_assigned_at))).scalar()
        if latest is not None and latest >= now:
            now = latest + timedelta(microseconds=1)

        self.db.execute(
            update(Agent).where(Agent.id == agent_id).values(last_assigned_at=now)
        )
        self.db.flush()

    # -----------------------------
    # ASSIGNMENTS
    # -----------------------------

    def most_recent_assignment_for(self, lead_phone: str) -> Optional[Assignment]:
        stmt = (
            select(Assignment)
            .where(Assignment.lead_phone == lead_phone)
            .order_by(Assignment.created_at.desc(), Assignment.id.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def create_assignment(
        self,
        lead_phone: str,
        lead_name: Optional[str],
        agent_id: int,
        message_text: Optional[str],
    ) -> Assignment:

        assignment = Assignment(
            lead_phone=lead_phone,
            lead_name=lead_name,
            agent_id=agent_id,
            message_text=message_text,
            created_at=utcnow(),
        )
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def record_notification_outcome(
        self,
        assignment_id: int,
        sent: bool,
        error: Optional[str] = None,
    ) -> None:
        self.db.execute(
            update(Assignment)
            .where(Assignment.id == assignment_id)
            .values(
                notification_sent=bool(sent),
                notification_error=None if sent else error,
            )
        )
        self.db.commit()

    def list_recent_assignments_with_agent(self, limit: int = 100) -> List[dict]:
        stmt = (
            select(
                Assignment,
                Agent.name.label("agent_name"),
                Agent.wa_number.label("agent_wa_number"),
            )
            .join(Agent, Assignment.agent_id == Agent.id)
            .order_by(Assignment.created_at.desc(), Assignment.id.desc())
            .limit(limit)
        )

        rows = []
        for assignment, agent_name, agent_wa_number in self.db.execute(stmt):
            row = assignment.to_dict()
            row["agent_name"] = agent_name
            row["agent_wa_number"] = agent_wa_number
            rows.append(row)
        return rows

    def count_assignments(self, lead_phone: Optional[str] = None) -> int:
        stmt = select(func.count(Assignment.id))
        if lead_phone is not None:
            stmt = stmt.where(Assignment.lead_phone == lead_phone)
        return self.db.execute(stmt).scalar() or 0

    # -----------------------------
    # UNIT OF WORK
    # -----------------------------

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
