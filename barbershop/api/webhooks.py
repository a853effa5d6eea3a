from __future__ import annotations

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from fastapi.responses import PlainTextResponse

from barbershop.application.dto.webhook_event import WebhookEventDTO
from barbershop.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from barbershop.application.use_cases.send_reply import SendReplyUseCase
from barbershop.core.config import settings
from barbershop.infrastructure.whatsapp.webhook_verify import verify_get_request, verify_post_signature
from barbershop.wiring.dependencies import get_handle_incoming_message_use_case, get_send_reply_use_case


router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/webhooks/whatsapp")
def verify_webhook(
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
):
    params = {
        "hub.mode": hub_mode or "",
        "hub.verify_token": hub_verify_token or "",
        "hub.challenge": hub_challenge or "",
    }
    challenge = verify_get_request(params, settings.WHATSAPP_VERIFY_TOKEN)
    if challenge is not None:
        logger.info("Webhook verified")
        return PlainTextResponse(challenge)
    logger.warning("Webhook verification failed")
    raise HTTPException(status_code=403, detail="Verification failed")


@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    use_case: HandleIncomingMessageUseCase = Depends(get_handle_incoming_message_use_case),
    send_reply: SendReplyUseCase = Depends(get_send_reply_use_case),
) -> Response:
    body = await request.body()
    signature = request.headers.get("X-Hub-Signature-256")
    if not verify_post_signature(body, signature, settings.WHATSAPP_APP_SECRET, settings.ENV):
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)

    try:
        event = WebhookEventDTO.model_validate(payload)
        if not event.is_whatsapp():
            return Response(status_code=404)

        messages = event.extract_messages()
        logger.info("Webhook received", extra={"message_count": len(messages)})

        for message in messages:
            background_tasks.add_task(send_reply.mark_read, message.id)
            background_tasks.add_task(use_case.handle, message)

        return Response(status_code=200)
    except Exception as e:
        logger.exception("Error processing webhook event", extra={"error": str(e)})
        return Response(status_code=500)
