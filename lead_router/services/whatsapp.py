import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

logger = logging.getLogger(__name__)

GRAPH_API_BASE = "https://graph.facebook.com"

DEFAULT_TEMPLATE_NAME = "nuevo_lead"
DEFAULT_TEMPLATE_LANGUAGE = "es_CL"

# Meta rejects empty template parameters and caps their length
MAX_PARAMETER_LENGTH = 1024
EMPTY_PARAMETER = "—"


@dataclass
class SendResult:
    success: bool
    data: Any = None
    error: Any = None

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}


def clean_template_parameter(value) -> str:
    text = "" if value is None else str(value)
    return text.strip()[:MAX_PARAMETER_LENGTH] or EMPTY_PARAMETER


class WhatsAppClient:
    """
    Minimal WhatsApp Cloud API client.

    Every call reports failures as a SendResult instead of raising, so the
    caller can record what happened. Nothing is retried.
    """

    def __init__(
        self,
        access_token: Optional[str],
        graph_api_version: str = "v21.0",
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ):
        self.access_token = access_token
        self.base_url = f"{GRAPH_API_BASE}/{graph_api_version}"
        self.timeout = timeout
        self.http = session or requests.Session()

    # -----------------------------
    # MESSAGES
    # -----------------------------

    def send_text(self, to: str, body: str, phone_number_id: str) -> SendResult:
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": str(to or "").strip(),
            "type": "text",
            "text": {
                "preview_url": False,
                "body": body,
            },
        }

        result = self._post(f"{self.base_url}/{phone_number_id}/messages", payload)

        if result.success:
            logger.info("Message sent to %s", to)
        else:
            logger.error("Failed to send message to %s: %s", to, result.error)

        return result

    def send_template(
        self,
        to: str,
        template_name: str,
        language_code: str,
        body_parameters: List[Any],
        phone_number_id: str,
    ) -> SendResult:
        """
        Send an approved template (allowed outside the 24h customer window).
        Body parameters are positional text variables.
        """

        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": str(to or "").strip(),
            "type": "template",
            "template": {
                "name": str(template_name or "").strip() or DEFAULT_TEMPLATE_NAME,
                "language": {
                    "code": str(language_code or "").strip() or DEFAULT_TEMPLATE_LANGUAGE,
                },
            },
        }

        if body_parameters:
            payload["template"]["components"] = [
                {
                    "type": "body",
                    "parameters": [
                        {"type": "text", "text": clean_template_parameter(p)}
                        for p in body_parameters
                    ],
                }
            ]

        logger.debug(
            "Template request | to=%s template=%s params=%d",
            payload["to"],
            payload["template"]["name"],
            len(body_parameters or []),
        )

        result = self._post(f"{self.base_url}/{phone_number_id}/messages", payload)

        if result.success:
            logger.info("Template message sent to %s", to)
        else:
            logger.error("Failed to send template to %s: %s", to, result.error)

        return result

    # -----------------------------
    # ACCOUNT
    # -----------------------------

    def get_phone_numbers(self, waba_id: str) -> SendResult:
        try:
            response = self.http.get(
                f"{self.base_url}/{waba_id}/phone_numbers",
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Failed to get phone numbers: %s", e)
            return SendResult(success=False, error=str(e))

        if response.status_code >= 400:
            error = _error_body(response)
            logger.error("Failed to get phone numbers: %s", error)
            return SendResult(success=False, error=error)

        return SendResult(success=True, data=_json_or_text(response))

    # -----------------------------
    # HTTP
    # -----------------------------

    def _post(self, url: str, payload: dict) -> SendResult:
        try:
            response = self.http.post(
                url,
                headers={
                    "Authorization": f"Bearer {self.access_token}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            return SendResult(success=False, error=str(e))

        if response.status_code >= 400:
            return SendResult(success=False, error=_error_body(response))

        return SendResult(success=True, data=_json_or_text(response))


def _json_or_text(response):
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_body(response):
    body = _json_or_text(response)
    return body if body else f"HTTP {response.status_code}"
