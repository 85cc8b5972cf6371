from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from lead_router.config import Settings, get_settings
from lead_router.deps import get_transport
from lead_router.services.whatsapp import WhatsAppClient

router = APIRouter(tags=["diagnostics"])


# ---------------- SCHEMA ----------------

class SendMessageRequest(BaseModel):
    to: Optional[str] = None
    message: Optional[str] = None


# ---------------- ROUTES ----------------

@router.post("/test/send-message")
def send_test_message(
    data: SendMessageRequest,
    transport: WhatsAppClient = Depends(get_transport),
    settings: Settings = Depends(get_settings),
):
    if not data.to or not data.message:
        raise HTTPException(400, "to and message are required")

    if not settings.phone_number_id:
        raise HTTPException(500, "WHATSAPP_PHONE_NUMBER_ID is not set")

    result = transport.send_text(data.to, data.message, settings.phone_number_id)
    return result.to_dict()


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):

    def flag(value):
        return "set" if value else "missing"

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "config": {
            "phone_number_id": flag(settings.phone_number_id),
            "waba_id": flag(settings.waba_id),
            "access_token": flag(settings.access_token),
        },
    }
