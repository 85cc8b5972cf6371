"""Tests for the WhatsApp Cloud API client."""

import requests

from lead_router.services.whatsapp import (
    EMPTY_PARAMETER,
    SendResult,
    WhatsAppClient,
    clean_template_parameter,
)


class FakeResponse:

    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """Records requests and replays a queued response or exception."""

    def __init__(self, response=None, exc=None):
        self.response = response or FakeResponse(200, {"messages": [{"id": "wamid.1"}]})
        self.exc = exc
        self.requests = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.requests.append({"method": "POST", "url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.exc:
            raise self.exc
        return self.response

    def get(self, url, headers=None, timeout=None):
        self.requests.append({"method": "GET", "url": url, "headers": headers, "timeout": timeout})
        if self.exc:
            raise self.exc
        return self.response


def make_client(session, **kwargs):
    return WhatsAppClient("secret-token", session=session, **kwargs)


class TestSendText:

    def test_payload_and_headers(self):
        session = FakeSession()
        client = make_client(session, graph_api_version="v20.0", timeout=5)

        result = client.send_text(" 56996096419 ", "hola", "1000000001")

        assert result.success is True
        assert result.data == {"messages": [{"id": "wamid.1"}]}

        sent = session.requests[0]
        assert sent["url"] == "https://graph.facebook.com/v20.0/1000000001/messages"
        assert sent["headers"]["Authorization"] == "Bearer secret-token"
        assert sent["timeout"] == 5
        assert sent["json"] == {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": "56996096419",
            "type": "text",
            "text": {"preview_url": False, "body": "hola"},
        }

    def test_api_error_is_returned(self):
        error = {"error": {"message": "(#131030) Recipient not in allowed list", "code": 131030}}
        session = FakeSession(FakeResponse(400, error))

        result = make_client(session).send_text("1", "hola", "1000000001")

        assert result == SendResult(success=False, error=error)

    def test_network_error_is_returned(self):
        session = FakeSession(exc=requests.ConnectionError("connection refused"))

        result = make_client(session).send_text("1", "hola", "1000000001")

        assert result.success is False
        assert "connection refused" in result.error


class TestSendTemplate:

    def test_body_parameters_are_cleaned(self):
        session = FakeSession()

        result = make_client(session).send_template(
            "56996096419",
            "nuevo_lead",
            "es_CL",
            ["  Ana  ", "", None, "x" * 2000],
            "1000000001",
        )

        assert result.success is True
        template = session.requests[0]["json"]["template"]
        assert template["name"] == "nuevo_lead"
        assert template["language"] == {"code": "es_CL"}

        params = template["components"][0]["parameters"]
        assert params[0] == {"type": "text", "text": "Ana"}
        assert params[1]["text"] == EMPTY_PARAMETER
        assert params[2]["text"] == EMPTY_PARAMETER
        assert len(params[3]["text"]) == 1024

    def test_default_name_and_language(self):
        session = FakeSession()

        make_client(session).send_template("1", "  ", "", [], "1000000001")

        template = session.requests[0]["json"]["template"]
        assert template["name"] == "nuevo_lead"
        assert template["language"]["code"] == "es_CL"
        assert "components" not in template

    def test_text_error_body(self):
        session = FakeSession(FakeResponse(502, None, "Bad Gateway"))

        result = make_client(session).send_template("1", "nuevo_lead", "es_CL", ["a"], "1000000001")

        assert result.success is False
        assert result.error == "Bad Gateway"


class TestPhoneNumbers:

    def test_get_phone_numbers(self):
        data = {"data": [{"id": "1000000001", "display_phone_number": "+56 9 5349 4307"}]}
        session = FakeSession(FakeResponse(200, data))

        result = make_client(session).get_phone_numbers("waba-1")

        assert result.success is True
        assert result.data == data
        assert session.requests[0]["url"].endswith("/waba-1/phone_numbers")

    def test_get_phone_numbers_error(self):
        session = FakeSession(FakeResponse(401, None, ""))

        result = make_client(session).get_phone_numbers("waba-1")

        assert result.success is False
        assert result.error == "HTTP 401"


def test_clean_template_parameter():
    assert clean_template_parameter(42) == "42"
    assert clean_template_parameter("   ") == EMPTY_PARAMETER


def test_send_result_to_dict():
    assert SendResult(True, data={"ok": 1}).to_dict() == {"success": True, "data": {"ok": 1}}
    assert SendResult(False, error="nope").to_dict() == {"success": False, "error": "nope"}
