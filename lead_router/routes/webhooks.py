import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from lead_router.deps import get_lead_router
from lead_router.errors import InvalidInput
from lead_router.services.router import LeadRouter, validate_lead_phone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhooks"])


# ---------------- SCHEMA ----------------

class LeadWebhook(BaseModel):
    lead_phone: Optional[str] = None
    lead_name: Optional[str] = None
    message_text: Optional[str] = None
    source: Optional[str] = None


# ---------------- ROUTE ----------------

@router.post("/main-whatsapp")
def main_whatsapp_webhook(
    payload: LeadWebhook,
    lead_router: LeadRouter = Depends(get_lead_router),
):
    """
    Inbound lead from the CRM automation (GHL).
    Assigns the lead and alerts the agent; the lead's own reply is
    handled upstream.
    """

    try:
        validate_lead_phone(payload.lead_phone)
    except InvalidInput as e:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": str(e)},
        )

    try:
        return lead_router.handle_incoming_lead(
            lead_phone=payload.lead_phone,
            lead_name=payload.lead_name,
            message_text=payload.message_text,
            source=payload.source or "ghl",
        )
    except Exception as e:
        logger.exception("Webhook error")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e)},
        )
