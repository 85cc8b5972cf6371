from fastapi import Depends
from sqlalchemy.orm import Session

from lead_router.config import Settings, get_settings
from lead_router.db import get_db
from lead_router.services.router import LeadRouter
from lead_router.services.whatsapp import WhatsAppClient
from lead_router.store import LeadStore


def get_store(db: Session = Depends(get_db)) -> LeadStore:
    return LeadStore(db)


def get_transport(settings: Settings = Depends(get_settings)) -> WhatsAppClient:
    return WhatsAppClient(
        access_token=settings.access_token,
        graph_api_version=settings.graph_api_version,
        timeout=settings.request_timeout,
    )


def get_lead_router(
    store: LeadStore = Depends(get_store),
    transport: WhatsAppClient = Depends(get_transport),
    settings: Settings = Depends(get_settings),
) -> LeadRouter:
    return LeadRouter(store, transport, settings)
