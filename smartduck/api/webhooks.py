from __future__ import annotations

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse

from smartduck.application.dto.webhook_event import WebhookEventDTO
from smartduck.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from smartduck.infrastructure.whatsapp.webhook_verify import WebhookVerifier
from smartduck.wiring.dependencies import get_handle_incoming_message_use_case, get_webhook_verifier


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/webhook")
def verify_webhook(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
):
    challenge = verifier.challenge_response(hub_mode, hub_verify_token, hub_challenge)
    if challenge is None:
        raise HTTPException(status_code=403, detail="Verification failed")
    return PlainTextResponse(challenge)


@router.post("/webhook")
async def whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
    use_case: HandleIncomingMessageUseCase = Depends(get_handle_incoming_message_use_case),
) -> Response:
    body = await request.body()
    signature = request.headers.get("X-Hub-Signature-256")
    if not verifier.is_authentic(body, signature):
        logger.warning("Rejected webhook with invalid signature")
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)

    # Always acknowledge once parsed: Meta retries non-2xx deliveries.
    try:
        event = WebhookEventDTO.model_validate(payload)
        messages = event.extract_messages()
        logger.info("Webhook received", extra={"message_count": len(messages)})
        for message in messages:
            background_tasks.add_task(use_case.handle, message)
    except Exception as e:
        logger.exception("Error processing webhook event", extra={"reason": str(e)})

    return Response(status_code=200)
