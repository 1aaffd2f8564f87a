from __future__ import annotations

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from pydantic import ValidationError

from barberbot.application.dto.telegram_update import TelegramUpdateDTO
from barberbot.application.use_cases.conversation_router import ConversationRouter
from barberbot.core.config import settings
from barberbot.infrastructure.telegram.webhook_verify import SECRET_HEADER, verify_secret_token
from barberbot.wiring.dependencies import get_conversation_router


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/webhooks/telegram")
async def telegram_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    conversation_router: ConversationRouter = Depends(get_conversation_router),
) -> Response:
    if not verify_secret_token(request.headers.get(SECRET_HEADER), settings.TELEGRAM_WEBHOOK_SECRET, settings.ENV):
        return Response(status_code=403)

    body = await request.body()
    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
        update = TelegramUpdateDTO.model_validate(payload)
    except (ValueError, ValidationError):
        logger.exception("Failed to parse webhook body")
        return Response(status_code=400)

    event = update.to_event()
    if event is None:
        logger.info("Update ignored", extra={"reason": f"update_id={update.update_id}"})
        return Response(status_code=200)

    logger.info(
        "Webhook received",
        extra={"conversation_id": event.conversation_id, "action": type(event).__name__},
    )
    background_tasks.add_task(conversation_router.handle, event)
    return Response(status_code=200)
