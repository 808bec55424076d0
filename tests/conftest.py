from __future__ import annotations

from typing import Sequence

import pytest

from smartduck.application.ports.message_platform import MediaFetcherPort, MessagePlatformPort
from smartduck.application.ports.transcriber import MediaTranscriberPort
from smartduck.domain.entities.knowledge_base import CityHours, Intent, IntentResponse, KnowledgeBase
from smartduck.infrastructure.knowledge.json_source import JsonKnowledgeBaseSource


@pytest.fixture(scope="session")
def kb() -> KnowledgeBase:
    return JsonKnowledgeBaseSource().load()


def make_intent(intent_id: str, patterns: list[str], fr: str = "", en: str | None = None, **kwargs) -> Intent:
    templates = {"fr": fr or f"reponse {intent_id}"}
    if en is not None:
        templates["en"] = en
    return Intent(
        id=intent_id,
        patterns=tuple(patterns),
        response=IntentResponse(templates=templates, quick_replies=tuple(kwargs.get("quick_replies", ()))),
        enrichments=tuple(kwargs.get("enrichments", ())),
    )


@pytest.fixture
def small_kb() -> KnowledgeBase:
    return KnowledgeBase(
        intents=(
            make_intent("greeting", [r"\bbonjour\b"]),
            make_intent(
                "pricing_zone",
                [r"\bprix\b"],
                fr="{zone} : {prix_zone} €",
                enrichments=("zone_price",),
                quick_replies=("RDV",),
            ),
            make_intent(
                "opening_hours",
                [r"\bhoraires?\b"],
                fr="Horaires {ville_ou_global} : {horaires_ville}",
                en="Hours {ville_ou_global}: {horaires_ville}",
                enrichments=("city_hours",),
            ),
        ),
        routing_order=("ghost", "pricing_zone", "opening_hours", "greeting"),
        entities={"zone": ("visage", "Épaules"), "city": ("Paris", "Lyon")},
        variable_defaults={"marque": "SmartDuck"},
        pricing={"visage": 49, "épaules": 59},
        hours={"Paris": CityHours(weekdays="9:30-19:30", saturday="10:00-18:00")},
    )


class FakePlatform(MessagePlatformPort, MediaFetcherPort):
    def __init__(self, media: bytes = b"audio-bytes", fail_send: bool = False) -> None:
        self.texts: list[tuple[str, str]] = []
        self.quick_replies: list[tuple[str, str, list[str]]] = []
        self.read: list[str] = []
        self.fetched: list[str] = []
        self._media = media
        self._fail_send = fail_send

    def send_text(self, recipient_id: str, text: str) -> None:
        if self._fail_send:
            raise RuntimeError("send failed")
        self.texts.append((recipient_id, text))

    def send_quick_replies(self, recipient_id: str, text: str, replies: Sequence[str]) -> None:
        if self._fail_send:
            raise RuntimeError("send failed")
        self.quick_replies.append((recipient_id, text, list(replies)))

    def mark_read(self, message_id: str) -> None:
        self.read.append(message_id)

    def fetch(self, media_id: str) -> bytes:
        self.fetched.append(media_id)
        return self._media


class FakeTranscriber(MediaTranscriberPort):
    def __init__(self, transcript: str) -> None:
        self.transcript = transcript
        self.calls: list[tuple[bytes, str]] = []

    def transcribe(self, audio: bytes, locale: str) -> str:
        self.calls.append((audio, locale))
        return self.transcript


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()
