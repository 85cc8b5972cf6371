import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from lead_router.config import get_settings
from lead_router.db import init_db
from lead_router.routes import agents, assignments, diagnostics, webhooks


# ---------------- LOGGING ----------------

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    filename=settings.log_file,
)

logger = logging.getLogger(__name__)


# ---------------- STARTUP ----------------

@asynccontextmanager
async def lifespan(app: FastAPI):

    # Storage problems abort startup
    init_db()

    missing = get_settings().missing_whatsapp_settings()
    if missing:
        logger.error(
            "Missing WhatsApp settings: %s. Agent notifications will fail.",
            ", ".join(missing),
        )

    logger.info("Lead router ready")
    yield


# ---------------- APP ----------------

app = FastAPI(title="WhatsApp Lead Router", lifespan=lifespan)

app.include_router(webhooks.router)       # /webhook/*
app.include_router(agents.router)         # /agents/*
app.include_router(assignments.router)    # /assignments
app.include_router(diagnostics.router)    # /test/*, /health


def run() -> None:
    uvicorn.run(
        "lead_router.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    run()
