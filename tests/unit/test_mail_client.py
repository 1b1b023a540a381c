"""Tests for the Mailgun transport against a mocked HTTP layer."""

import asyncio
import base64
from urllib.parse import parse_qs

import httpx
import pytest

from app.errors import ConfigurationError
from mail_client import MailgunMessage, MailgunTransport, TransportError


def make_transport(handler):
    return MailgunTransport(
        api_key="key-123",
        domain="mg.board.org",
        sender="Board <voting@mg.board.org>",
        base_url="https://api.mailgun.test/v3",
        http_transport=httpx.MockTransport(handler),
    )


async def send_one(transport):
    async with transport as client:
        ok = await client.send("ann@board.org", "Subject", "<p>hi</p>", "hi")
        return ok, client.request_count


class TestMailgunTransport:
    def test_send_posts_form(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["authorization"]
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"id": "<abc@mg>", "message": "Queued. Thank you."})

        ok, count = asyncio.run(send_one(make_transport(handler)))

        assert ok is True
        assert count == 1
        assert seen["path"] == "/v3/mg.board.org/messages"
        assert seen["auth"] == "Basic " + base64.b64encode(b"api:key-123").decode()
        assert seen["form"]["from"] == ["Board <voting@mg.board.org>"]
        assert seen["form"]["to"] == ["ann@board.org"]
        assert seen["form"]["subject"] == ["Subject"]
        assert seen["form"]["text"] == ["hi"]

    def test_missing_id_is_rejection(self):
        ok, _ = asyncio.run(send_one(make_transport(lambda r: httpx.Response(200, json={"message": "?"}))))
        assert ok is False

    def test_http_error(self):
        transport = make_transport(lambda r: httpx.Response(500, text="upstream down"))

        with pytest.raises(TransportError) as exc:
            asyncio.run(send_one(transport))

        assert exc.value.status_code == 500
        assert "upstream down" in exc.value.message

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransportError) as exc:
            asyncio.run(send_one(make_transport(handler)))

        assert exc.value.status_code is None

    def test_send_outside_context(self):
        transport = make_transport(lambda r: httpx.Response(200, json={"id": "x"}))
        with pytest.raises(TransportError):
            asyncio.run(transport.send("ann@board.org", "s", "h", "t"))

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationError):
            MailgunTransport(api_key=None, domain="mg.board.org")
        with pytest.raises(ConfigurationError):
            MailgunTransport(api_key="key", domain="")


class TestMailgunMessage:
    def test_form_uses_alias_and_drops_empty(self):
        form = MailgunMessage(sender="a@b.org", to="c@d.org", subject="s", text="t").form()
        assert form == {"from": "a@b.org", "to": "c@d.org", "subject": "s", "text": "t"}
