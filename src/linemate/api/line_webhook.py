"""
LINE webhook.

Responsibilities:
- (Optional) Validate the X-Line-Signature header against the channel secret
- Parse the event batch
- Hand the batch to the event dispatcher and wait for it
- Respond 200 once events are accepted; 500 only if the batch cannot be parsed
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Request, Response
from linebot.v3.webhook import SignatureValidator

from src.linemate.exceptions import InvalidPayloadError
from src.linemate.inputs.line.events import parse_events
from src.linemate.logging.logger import setup_logger

logger = setup_logger(__name__)

router = APIRouter()


def _validate_line_signature(body: str, signature: str, channel_secret: str) -> bool:
    """
    LINE signs the raw request body with HMAC-SHA256 keyed by the channel secret.
    """
    if not signature:
        return False
    return SignatureValidator(channel_secret).validate(body, signature)


@router.post("/webhook")
async def line_webhook(request: Request) -> Response:
    services = request.app.state.services
    cfg = services.settings

    raw_body = (await request.body()).decode("utf-8", errors="replace")

    if cfg.line_validate_signature:
        if not cfg.channel_secret:
            logger.error("LINE signature validation enabled but channel_secret is missing")
            return Response("Server misconfigured", status_code=500)
        signature = request.headers.get("X-Line-Signature", "")
        if not _validate_line_signature(raw_body, signature, cfg.channel_secret):
            logger.warning("LINE signature validation failed | signature_present=%s", bool(signature))
            return Response("Invalid signature", status_code=401)
    else:
        logger.warning("LINE signature validation is DISABLED (local testing only)")

    try:
        events = parse_events(json.loads(raw_body))
    except (ValueError, InvalidPayloadError) as exc:
        logger.error("Webhook error: cannot parse event batch", exc_info=exc)
        return Response(status_code=500)

    logger.info("LINE webhook received | events=%s", len(events))

    await services.dispatcher.handle_events(events)

    return Response(status_code=200)
