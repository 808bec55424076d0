from __future__ import annotations

import hashlib
import hmac
import logging


DEV_ENVS = {"dev", "local", "test"}


class WebhookVerifier:
    """
    Meta webhook checks: the GET subscription handshake and the
    `X-Hub-Signature-256` HMAC on POST bodies.

    Outside dev/local an app secret and a signature are mandatory.
    """

    def __init__(self, verify_token: str, app_secret: str | None, env: str) -> None:
        self._verify_token = verify_token
        self._app_secret = app_secret
        self._lenient = env.lower() in DEV_ENVS
        self._logger = logging.getLogger(__name__)

    def challenge_response(self, mode: str | None, token: str | None, challenge: str | None) -> str | None:
        if mode not in (None, "subscribe"):
            return None
        if not self._verify_token or token != self._verify_token or not challenge:
            return None
        return challenge

    def is_authentic(self, body: bytes, signature_header: str | None) -> bool:
        if not self._app_secret:
            if self._lenient:
                return True
            self._logger.error("Missing app secret for signature verification")
            return False

        if not signature_header:
            if self._lenient:
                self._logger.warning("Missing signature header; accepting in dev mode")
                return True
            return False

        algo, _, signature = signature_header.partition("=")
        if algo.lower() != "sha256" or not signature:
            return False

        expected = hmac.new(self._app_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature)
