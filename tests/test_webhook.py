"""
Tests for the FastAPI webhook surface.
"""

from __future__ import annotations

import hashlib
import hmac
import json

import pytest
from fastapi.testclient import TestClient

import smartduck.main as main_module
from conftest import FakePlatform
from smartduck.application.exceptions import LoadError
from smartduck.application.use_cases.classify_intent import IntentClassifier
from smartduck.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from smartduck.application.use_cases.reply_composer import ResponseComposer
from smartduck.application.use_cases.send_reply import SendReplyUseCase
from smartduck.application.utils.locale_detector import LocaleDetector
from smartduck.infrastructure.knowledge.json_source import JsonKnowledgeBaseSource
from smartduck.infrastructure.knowledge.knowledge_store import KnowledgeBaseStore
from smartduck.infrastructure.whatsapp.webhook_verify import WebhookVerifier
from smartduck.main import app
from smartduck.wiring.dependencies import get_handle_incoming_message_use_case, get_webhook_verifier


def _payload(*messages: dict) -> dict:
    return {
        "object": "whatsapp_business_account",
        "entry": [{"id": "waba", "changes": [{"field": "messages", "value": {"messages": list(messages)}}]}],
    }


def _text(body: str, mid: str = "wamid.1") -> dict:
    return {"from": "33612345678", "id": mid, "timestamp": "1700000000", "type": "text", "text": {"body": body}}


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def client(kb, platform):
    def use_case() -> HandleIncomingMessageUseCase:
        return HandleIncomingMessageUseCase(
            classifier=IntentClassifier(kb),
            composer=ResponseComposer(kb),
            locale_detector=LocaleDetector(default_locale="fr"),
            send_reply=SendReplyUseCase(platform=platform),
            platform=platform,
            media=platform,
            transcriber=None,
        )

    app.dependency_overrides[get_handle_incoming_message_use_case] = use_case
    app.dependency_overrides[get_webhook_verifier] = lambda: WebhookVerifier("dev-verify-token", None, "dev")
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_verify_token_returns_challenge(client):
    resp = client.get("/webhook", params={"hub.verify_token": "dev-verify-token", "hub.challenge": "123"})

    assert resp.status_code == 200
    assert resp.text == "123"


def test_verify_with_subscribe_mode(client):
    resp = client.get(
        "/webhook",
        params={"hub.mode": "subscribe", "hub.verify_token": "dev-verify-token", "hub.challenge": "abc"},
    )

    assert resp.status_code == 200
    assert resp.text == "abc"


@pytest.mark.parametrize(
    "params",
    [
        {"hub.verify_token": "wrong", "hub.challenge": "123"},
        {"hub.verify_token": "dev-verify-token"},
        {"hub.mode": "unsubscribe", "hub.verify_token": "dev-verify-token", "hub.challenge": "1"},
    ],
)
def test_verify_rejects(client, params):
    assert client.get("/webhook", params=params).status_code == 403


def test_incoming_text_message_is_answered(client, platform):
    resp = client.post("/webhook", json=_payload(_text("bonjour")))

    assert resp.status_code == 200
    assert len(platform.quick_replies) == 1
    recipient, text, replies = platform.quick_replies[0]
    assert recipient == "33612345678"
    assert text.startswith("Bonjour")
    assert replies == ["Tarifs", "Prestations", "RDV"]


def test_each_message_is_handled(client, platform):
    resp = client.post("/webhook", json=_payload(_text("bonjour", "m1"), _text("merci", "m2")))

    assert resp.status_code == 200
    assert platform.read == ["m1", "m2"]


def test_status_callbacks_are_acknowledged(client, platform):
    payload = {"entry": [{"changes": [{"value": {"statuses": [{"id": "wamid.1", "status": "read"}]}}]}]}

    assert client.post("/webhook", json=payload).status_code == 200
    assert platform.read == []


def test_invalid_json_is_rejected(client):
    resp = client.post("/webhook", content=b"{oops", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400


def test_unexpected_shape_is_still_acknowledged(client):
    assert client.post("/webhook", json=["not", "an", "object"]).status_code == 200


def test_signature_is_enforced_outside_dev(kb, platform):
    secret = "s3cret"
    app.dependency_overrides[get_webhook_verifier] = lambda: WebhookVerifier("token", secret, "prod")
    app.dependency_overrides[get_handle_incoming_message_use_case] = lambda: HandleIncomingMessageUseCase(
        classifier=IntentClassifier(kb),
        composer=ResponseComposer(kb),
        locale_detector=LocaleDetector(),
        send_reply=SendReplyUseCase(platform=platform),
        platform=platform,
        media=platform,
        transcriber=None,
    )
    try:
        client = TestClient(app)
        body = json.dumps(_payload(_text("bonjour"))).encode("utf-8")
        good = "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
        headers = {"Content-Type": "application/json"}

        assert client.post("/webhook", content=body, headers=headers).status_code == 403
        assert client.post("/webhook", content=body, headers={**headers, "X-Hub-Signature-256": "sha256=bad"}).status_code == 403
        assert client.post("/webhook", content=body, headers={**headers, "X-Hub-Signature-256": good}).status_code == 200
        assert len(platform.quick_replies) == 1
    finally:
        app.dependency_overrides.clear()


def test_health_loads_knowledge_base_on_startup(monkeypatch):
    store = KnowledgeBaseStore(JsonKnowledgeBaseSource())
    monkeypatch.setattr(main_module, "get_knowledge_base_store", lambda: store)

    with TestClient(app) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": main_module.VERSION}
    assert store.is_loaded


def test_startup_fails_without_knowledge_base(monkeypatch, tmp_path):
    store = KnowledgeBaseStore(JsonKnowledgeBaseSource(tmp_path / "missing.json"))
    monkeypatch.setattr(main_module, "get_knowledge_base_store", lambda: store)

    with pytest.raises(LoadError):
        with TestClient(app):
            pass
