import json
import logging
import re
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from lead_router.config import Settings
from lead_router.errors import (
    InvalidInput,
    MissingSenderIdentity,
    NoActiveAgents,
    NotificationFailure,
)
from lead_router.models import Agent
from lead_router.store import LeadStore
from lead_router.services.whatsapp import SendResult, WhatsAppClient

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "No proporcionado"
MESSAGE_PLACEHOLDER = "Sin mensaje"

_PHONE_NOISE = re.compile(r"[\s\-()]")

# Agent selection and the last_assigned_at update form one rotation
# decision; only one may run at a time in this process.
_rotation_lock = threading.Lock()


class SelectionState(str, Enum):
    STICKY = "sticky"
    STICKY_UNRESOLVED = "sticky_unresolved"
    ROUND_ROBIN = "round_robin"
    EXHAUSTED = "exhausted"


@dataclass
class Selection:
    agent: Agent
    is_returning: bool
    state: SelectionState


def normalize_phone(phone: str) -> str:
    """Strip whitespace, dashes, parentheses and a leading '+'."""
    return _PHONE_NOISE.sub("", phone or "").lstrip("+")


def validate_lead_phone(phone: Optional[str]) -> str:
    """Return the routing key for a lead phone, or raise InvalidInput."""
    key = normalize_phone(phone or "")
    if not key:
        raise InvalidInput("lead_phone is required")
    if not re.search(r"\d", key):
        raise InvalidInput("lead_phone must contain digits")
    return key


def format_phone_for_display(phone: str) -> str:
    """
    "56912345678" -> "+56 9 1234 5678" (Chilean mobile),
    anything else -> "+" followed by its digits.
    """

    digits = re.sub(r"\D", "", phone or "")

    if digits.startswith("56") and len(digits) == 11:
        return f"+56 {digits[2:3]} {digits[3:7]} {digits[7:]}"

    return f"+{digits}"


def stringify_error(error) -> Optional[str]:
    if error is None:
        return None
    if isinstance(error, str):
        return error
    return json.dumps(error, ensure_ascii=False, default=str)


class LeadRouter:
    """
    Routes inbound leads to agents and alerts the chosen agent.

    Returning leads (a phone with a previous assignment) stay with the
    agent who handled them. New leads go to the active agent whose last
    new-lead turn is oldest, never-assigned agents first. Only new leads
    move an agent's position in the rotation.

    The assignment row is written and committed before the agent is
    notified; the delivery outcome is then stored on that row. A failed
    notification never undoes the assignment.
    """

    def __init__(self, store: LeadStore, transport: WhatsAppClient, settings: Settings):
        self.store = store
        self.transport = transport
        self.settings = settings

    # -----------------------------
    # SELECTION
    # -----------------------------

    def next_agent(self) -> Agent:
        agents = self.store.list_active_agents()

        if not agents:
            logger.warning("No active agents available")
            raise NoActiveAgents()

        return agents[0]

    def select_agent(self, lead_phone: str) -> Selection:
        phone = normalize_phone(lead_phone)

        previous = self.store.most_recent_assignment_for(phone)

        if previous is None:
            return Selection(self.next_agent(), False, SelectionState.ROUND_ROBIN)

        agent = self.store.get_agent(previous.agent_id)
        if agent is not None:
            return Selection(agent, True, SelectionState.STICKY)

        logger.warning(
            "Previous agent %s for lead %s not found, using round robin",
            previous.agent_id,
            phone,
        )
        return Selection(self.next_agent(), False, SelectionState.STICKY_UNRESOLVED)

    def record_assignment(
        self,
        lead_phone: str,
        lead_name: Optional[str],
        agent: Agent,
        message_text: Optional[str],
        is_returning: bool,
    ) -> dict:

        phone = normalize_phone(lead_phone)

        try:
            assignment = self.store.create_assignment(phone, lead_name, agent.id, message_text)
            if not is_returning:
                self.store.touch_agent_last_assigned(agent.id)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        logger.info(
            "%s lead %s to agent %s (%s)",
            "Re-assigned" if is_returning else "Assigned",
            phone,
            agent.name,
            agent.wa_number,
        )

        return {
            "assignment": {
                "id": assignment.id,
                "lead_phone": phone,
                "lead_name": lead_name,
                "message_text": message_text,
            },
            "agent": agent.summary(),
        }

    def assign_lead(
        self,
        lead_phone: str,
        lead_name: Optional[str] = None,
        message_text: Optional[str] = None,
    ) -> dict:
        with _rotation_lock:
            selection = self.select_agent(lead_phone)
            return self.record_assignment(
                lead_phone,
                lead_name,
                selection.agent,
                message_text,
                selection.is_returning,
            )

    # -----------------------------
    # MAIN ENTRY
    # -----------------------------

    def handle_incoming_lead(
        self,
        lead_phone: Optional[str],
        lead_name: Optional[str] = None,
        message_text: Optional[str] = None,
        source: Optional[str] = None,
    ) -> dict:

        logger.info(
            "Incoming lead from %s | phone=%s name=%s",
            source or "unknown",
            lead_phone,
            lead_name or "N/A",
        )

        # ---------- PHASE 1: ASSIGN ----------
        try:
            validate_lead_phone(lead_phone)

            assigned = self.assign_lead(lead_phone, lead_name, message_text)

        except (InvalidInput, NoActiveAgents) as e:
            return {"success": False, "error": str(e)}

        assignment = assigned["assignment"]
        agent = assigned["agent"]

        # ---------- PHASE 2: NOTIFY ----------
        result = self.notify_agent(agent, lead_phone, lead_name, message_text, source)

        self.store.record_notification_outcome(
            assignment["id"],
            result.success,
            stringify_error(result.error),
        )

        return {
            "success": result.success,
            "assignment": assignment,
            "agent": agent,
            "notification_sent": result.success,
            "notification_error": result.error if not result.success else None,
        }

    # -----------------------------
    # NOTIFICATION
    # -----------------------------

    def notify_agent(
        self,
        agent: dict,
        lead_phone: str,
        lead_name: Optional[str],
        message_text: Optional[str],
        source: Optional[str] = None,
    ) -> SendResult:

        try:
            to, sender = self._resolve_route(agent)
        except NotificationFailure as e:
            logger.error("Agent %s not notified: %s", agent["id"], e)
            return SendResult(success=False, error=str(e))

        name = str(lead_name or NAME_PLACEHOLDER).strip() or NAME_PLACEHOLDER
        message = str(message_text or MESSAGE_PLACEHOLDER).strip() or MESSAGE_PLACEHOLDER
        phone_display = format_phone_for_display(lead_phone)

        if self.settings.notification_mode == "text":
            body = (
                f"Nuevo lead ({source or 'whatsapp'})\n"
                f"Nombre: {name}\n"
                f"Teléfono: {phone_display}\n"
                f"Mensaje: {message}"
            )
            return self.transport.send_text(to, body, sender)

        # Template variables are plain text; the phone goes without spaces
        phone_param = "+" + re.sub(r"\D", "", phone_display)

        return self.transport.send_template(
            to,
            self.settings.template_name,
            self.settings.template_language,
            [name, phone_param, message],
            sender,
        )

    def _resolve_route(self, agent: dict):
        sender = agent.get("phone_number_id") or self.settings.phone_number_id
        if not sender:
            raise MissingSenderIdentity("No sender phone_number_id configured")

        if not self.settings.access_token:
            raise MissingSenderIdentity("No WhatsApp access token configured")

        to = re.sub(r"\D", "", agent.get("wa_number") or "")
        if not to:
            raise NotificationFailure("Agent has no usable wa_number")

        return to, sender
