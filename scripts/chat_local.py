#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP, no WhatsApp).

Usage:
  python3 scripts/chat_local.py [--kb path/to/knowledge_base.json]

Runs each typed line through the same locale detection, classification and
composition as the webhook, then prints the decision and the reply.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from smartduck.application.use_cases.classify_intent import IntentClassifier
from smartduck.application.use_cases.reply_composer import ResponseComposer
from smartduck.application.utils.locale_detector import LocaleDetector
from smartduck.infrastructure.knowledge.json_source import JsonKnowledgeBaseSource
from smartduck.infrastructure.knowledge.knowledge_store import KnowledgeBaseStore


def _print_header(kb_path: Path) -> None:
    print("\nLocal Chat Harness")
    print("-" * 60)
    print(f"knowledge base: {kb_path}")
    print("Type your message and press Enter.")
    print("Commands: /fr, /en (force locale), /auto, /quit, /help")
    print("-" * 60)


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with the bot pipeline locally")
    parser.add_argument("--kb", default=None, help="Knowledge base JSON file")
    parser.add_argument("--default-locale", default="fr")
    args = parser.parse_args()

    source = JsonKnowledgeBaseSource(args.kb)
    kb = KnowledgeBaseStore(source).load()
    classifier = IntentClassifier(kb)
    composer = ResponseComposer(kb, default_locale=args.default_locale)
    detector = LocaleDetector(default_locale=args.default_locale)
    forced_locale: str | None = None
    _print_header(source.path)

    while True:
        try:
            user_text = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_text:
            continue

        cmd = user_text.lower()
        if cmd in ("/quit", "/exit"):
            print("Bye!")
            return
        if cmd == "/help":
            print("Commands:")
            print("  /fr, /en -> force the reply locale")
            print("  /auto -> detect the locale from each message")
            print("  /quit -> exit")
            continue
        if cmd in ("/fr", "/en"):
            forced_locale = cmd[1:]
            print(f"Locale forced to {forced_locale}")
            continue
        if cmd == "/auto":
            forced_locale = None
            print("Locale detection enabled")
            continue

        locale = forced_locale or detector.detect(user_text)
        classified = classifier.classify(user_text, locale)
        plan = composer.compose(classified)

        print("\n--- Decision ---")
        print(f"intent: {classified.intent_id} ({classified.confidence})")
        print(f"language: {classified.locale}")
        if classified.matched_pattern:
            print(f"pattern: {classified.matched_pattern}")
        for entity in classified.entities:
            print(f"entity: {entity.type}={entity.value}")

        print("\n--- Reply ---")
        print(plan.text.strip() or "(empty reply)")
        if plan.quick_replies:
            print("quick replies: " + " | ".join(plan.quick_replies))
        print("-" * 60)


if __name__ == "__main__":
    main()
