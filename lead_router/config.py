import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

# -------------------------------------------------
# Load environment variables from .env
# -------------------------------------------------
load_dotenv()


NOTIFICATION_MODES = ("template", "text")


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./router.db"

    # WhatsApp Cloud API
    phone_number_id: Optional[str] = None
    waba_id: Optional[str] = None
    access_token: Optional[str] = None
    graph_api_version: str = "v21.0"
    template_name: str = "nuevo_lead"
    template_language: str = "es_CL"
    notification_mode: str = "template"
    request_timeout: float = 10.0

    # Process
    log_level: str = "INFO"
    log_file: Optional[str] = None
    port: int = 3000

    def missing_whatsapp_settings(self) -> list:
        missing = []
        if not self.phone_number_id:
            missing.append("WHATSAPP_PHONE_NUMBER_ID")
        if not self.access_token:
            missing.append("WHATSAPP_ACCESS_TOKEN")
        return missing


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_settings() -> Settings:
    """
    Build Settings from the process environment (.env already loaded).
    """

    mode = (_env("NOTIFICATION_MODE") or "template").lower()
    if mode not in NOTIFICATION_MODES:
        raise RuntimeError(
            f"NOTIFICATION_MODE must be one of {NOTIFICATION_MODES}, got {mode!r}"
        )

    return Settings(
        database_url=_env("DATABASE_URL") or "sqlite:///./router.db",
        phone_number_id=_env("WHATSAPP_PHONE_NUMBER_ID"),
        waba_id=_env("WHATSAPP_WABA_ID"),
        access_token=_env("WHATSAPP_ACCESS_TOKEN"),
        graph_api_version=_env("GRAPH_API_VERSION") or "v21.0",
        template_name=_env("WHATSAPP_TEMPLATE_NAME") or "nuevo_lead",
        template_language=_env("WHATSAPP_TEMPLATE_LANGUAGE") or "es_CL",
        notification_mode=mode,
        request_timeout=float(_env("WHATSAPP_TIMEOUT") or 10),
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        log_file=_env("LOG_FILE"),
        port=int(_env("PORT") or 3000),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
