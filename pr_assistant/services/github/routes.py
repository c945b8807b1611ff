"""GitHub webhook routes."""

import pydantic
from fastapi import APIRouter, Request
from loguru import logger

from pr_assistant.core.exceptions import ValidationError
from pr_assistant.services.assistant.service import SUPPORTED_EVENTS, dispatch_event, parse_event
from pr_assistant.services.github.schemas import PingResponse, WebhookResponse

router = APIRouter()


@router.post("/webhook/github")
async def github_webhook(request: Request):
    """Handle GitHub webhook events."""
    event = request.headers.get("X-GitHub-Event")
    delivery_id = request.headers.get("X-GitHub-Delivery")

    logger.info(f"Webhook received: event={event}, delivery={delivery_id}")

    payload = await request.json()

    if event == "ping":
        return PingResponse(zen=payload.get("zen", ""))
    if event not in SUPPORTED_EVENTS:
        logger.info(f"Unhandled event type: {event}")
        return WebhookResponse(message=f"Event {event} not handled")

    try:
        assistant_event = parse_event(event, payload)
    except pydantic.ValidationError as e:
        logger.warning(f"Invalid {event} payload: {e.error_count()} error(s)")
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ValidationError(f"Invalid {event} payload", {"errors": errors})

    result = dispatch_event(request.app.state.runtime, assistant_event)
    return WebhookResponse(
        message=f"Event {result.outcome}" + (f": {result.reason}" if result.reason else ""),
        process_id=result.process_id,
        action=payload.get("action"),
    )
