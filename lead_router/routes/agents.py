import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from lead_router.deps import get_store
from lead_router.errors import DuplicateRoutingAddress
from lead_router.store import LeadStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agents", tags=["agents"])


# ---------------- SCHEMA ----------------

class AgentCreate(BaseModel):
    name: Optional[str] = None
    wa_number: Optional[str] = None
    phone_number_id: Optional[str] = None


class AgentActiveUpdate(BaseModel):
    active: bool


# ---------------- ROUTES ----------------

@router.get("")
def list_agents(store: LeadStore = Depends(get_store)):
    agents = store.list_active_agents()
    return {"success": True, "agents": [a.to_dict() for a in agents]}


@router.post("")
def add_agent(data: AgentCreate, store: LeadStore = Depends(get_store)):

    name = (data.name or "").strip()
    wa_number = (data.wa_number or "").strip()

    if not name or not wa_number:
        raise HTTPException(400, "name and wa_number are required")

    try:
        agent = store.create_agent(name, wa_number, data.phone_number_id)
    except DuplicateRoutingAddress as e:
        raise HTTPException(409, str(e))

    return {"success": True, "agent": agent.summary()}


@router.patch("/{agent_id}/active")
def set_agent_active(
    agent_id: int,
    data: AgentActiveUpdate,
    store: LeadStore = Depends(get_store),
):

    if not store.set_agent_active(agent_id, data.active):
        raise HTTPException(404, "Agent not found")

    logger.info("Agent %s active=%s", agent_id, data.active)
    return {"success": True}
