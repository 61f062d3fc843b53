# =============================================================================
# app/routers/webhooks.py - Stripe Webhook Endpoint
# =============================================================================
# POST /api/stripe-webhook
#
# The raw body is needed for signature verification, so the payload is
# read from the request rather than parsed into a model.
# =============================================================================

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.dependencies import WebhookHandlerDep
from app.exceptions import CatalogAppException

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/stripe-webhook")
async def stripe_webhook(request: Request, handler: WebhookHandlerDep):
    """
    Handle Stripe subscription and checkout events.

    Returns 400 when the signature doesn't verify and 500 when processing
    fails, so Stripe retries the delivery.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    event = handler.verify_webhook_signature(payload, sig_header)

    try:
        result = handler.handle_event(event)
    except CatalogAppException:
        raise
    except Exception as e:
        logger.exception(f"Webhook processing error for {event.get('type')} ({event.get('id')}): {e}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Webhook processing failed", "code": "WEBHOOK_PROCESSING_FAILED"},
        )

    logger.info(f"Webhook processed: {event.get('type')} - {result.get('status')}")
    return {"received": True, "event_type": event.get("type"), "result": result}
