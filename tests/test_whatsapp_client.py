"""
Tests for the WhatsApp Cloud API client, payload parsing and signature checks.
"""

from __future__ import annotations

import hashlib
import hmac
import json

import httpx
import pytest

from smartduck.application.dto.webhook_event import WebhookEventDTO
from smartduck.application.exceptions import MediaDownloadError, SendError
from smartduck.infrastructure.whatsapp.webhook_verify import WebhookVerifier
from smartduck.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from smartduck.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform


API = "https://graph.example.test/v21.0"


def _client(handler) -> tuple[WhatsAppClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    http = httpx.Client(transport=httpx.MockTransport(record))
    return WhatsAppClient("token-1", "555", API, client=http), seen


def test_send_text_posts_message_payload():
    client, seen = _client(lambda r: httpx.Response(200, json={"messages": [{"id": "wamid.x"}]}))

    client.send_text("33612345678", "Bonjour")

    assert str(seen[0].url) == f"{API}/555/messages"
    assert seen[0].headers["Authorization"] == "Bearer token-1"
    assert json.loads(seen[0].content) == {
        "messaging_product": "whatsapp",
        "to": "33612345678",
        "type": "text",
        "text": {"body": "Bonjour"},
    }


def test_send_buttons_caps_count_and_title_length():
    client, seen = _client(lambda r: httpx.Response(200, json={}))

    client.send_buttons("1", "Choisissez", ["Tarifs", "Une option beaucoup trop longue", "RDV", "Extra"])

    body = json.loads(seen[0].content)
    buttons = body["interactive"]["action"]["buttons"]
    assert body["type"] == "interactive"
    assert body["interactive"]["body"]["text"] == "Choisissez"
    assert [b["reply"]["title"] for b in buttons] == ["Tarifs", "Une option beaucoup", "RDV"]
    assert all(len(b["reply"]["title"]) <= 20 for b in buttons)


def test_send_error_on_http_failure():
    error = {"error": {"code": 131030, "message": "Recipient not allowed", "error_subcode": 2655007}}
    client, _ = _client(lambda r: httpx.Response(400, json=error))

    with pytest.raises(SendError):
        client.send_text("1", "hi")


def test_send_error_on_transport_failure():
    def explode(request):
        raise httpx.ConnectError("down", request=request)

    client, _ = _client(explode)

    with pytest.raises(SendError):
        client.send_text("1", "hi")


def test_mark_read_failure_does_not_raise():
    client, seen = _client(lambda r: httpx.Response(500, text="nope"))

    client.mark_read("wamid.1")

    assert json.loads(seen[0].content)["status"] == "read"


def test_platform_fetch_resolves_url_then_downloads():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/media-9"):
            return httpx.Response(200, json={"url": "https://cdn.example.test/file.ogg"})
        if request.url.host == "cdn.example.test":
            return httpx.Response(200, content=b"OggS...")
        return httpx.Response(404)

    client, seen = _client(handler)

    assert WhatsAppPlatform(client).fetch("media-9") == b"OggS..."
    assert all(r.headers["Authorization"] == "Bearer token-1" for r in seen)


def test_media_url_missing_is_download_error():
    client, _ = _client(lambda r: httpx.Response(200, json={}))

    with pytest.raises(MediaDownloadError):
        client.get_media_url("media-9")


def test_media_download_http_error():
    client, _ = _client(lambda r: httpx.Response(403, text="expired"))

    with pytest.raises(MediaDownloadError):
        client.download_media("https://cdn.example.test/file.ogg")


def test_extract_messages_by_type():
    payload = {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "changes": [
                    {
                        "value": {
                            "messages": [
                                {"from": "1", "id": "a", "timestamp": "10", "type": "text", "text": {"body": "bonjour"}},
                                {"from": "1", "id": "b", "timestamp": "11", "type": "audio", "audio": {"id": "m1"}},
                                {"from": "1", "id": "c", "timestamp": "12", "type": "voice", "voice": {"id": "m2"}},
                                {"from": "1", "id": "d", "timestamp": "13", "type": "image", "image": {"id": "m3", "caption": "prix ?"}},
                                {"from": "1", "id": "e", "timestamp": "14", "type": "interactive", "interactive": {"type": "button_reply", "button_reply": {"id": "qr_0", "title": "Tarifs"}}},
                                {"from": "1", "id": "f", "timestamp": "15", "type": "button", "button": {"text": "RDV"}},
                                {"from": "1", "id": "g", "timestamp": "16", "type": "sticker", "sticker": {"id": "m4"}},
                                {"id": "h", "type": "text", "text": {"body": "no sender"}},
                            ]
                        }
                    }
                ]
            }
        ],
    }

    messages = WebhookEventDTO.model_validate(payload).extract_messages()

    assert [(m.id, m.type) for m in messages] == [
        ("a", "text"),
        ("b", "audio"),
        ("c", "audio"),
        ("d", "image"),
        ("e", "text"),
        ("f", "text"),
        ("g", "sticker"),
    ]
    assert messages[0].text == "bonjour"
    assert messages[0].timestamp == 10
    assert messages[1].media_id == "m1"
    assert messages[2].media_id == "m2"
    assert messages[3].caption == "prix ?"
    assert messages[4].text == "Tarifs"
    assert messages[5].text == "RDV"


def test_signature_verification():
    secret = "s3cret"
    body = b'{"entry": []}'
    good = "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    verifier = WebhookVerifier("token", secret, "prod")

    assert verifier.is_authentic(body, good)
    assert not verifier.is_authentic(body, "sha256=deadbeef")
    assert not verifier.is_authentic(body, "sha1=" + good.split("=", 1)[1])
    assert not verifier.is_authentic(body, None)


def test_signature_leniency_in_dev():
    assert WebhookVerifier("token", None, "dev").is_authentic(b"{}", None)
    assert WebhookVerifier("token", "s3cret", "local").is_authentic(b"{}", None)
    assert not WebhookVerifier("token", None, "prod").is_authentic(b"{}", None)


def test_challenge_requires_configured_token():
    assert WebhookVerifier("", None, "dev").challenge_response("subscribe", "", "1") is None
    assert WebhookVerifier("t", None, "dev").challenge_response("subscribe", "t", "1") == "1"
