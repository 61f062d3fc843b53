# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for non-user auth and shared handlers.
# These are injected into route handlers using Depends().
# =============================================================================

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header

from app.config import settings
from app.exceptions import AdminAuthError
from core.services.webhook_service import StripeWebhookHandler

logger = logging.getLogger(__name__)


def _tokens_match(given: str | None, expected: str) -> bool:
    return bool(given) and hmac.compare_digest(given.encode(), expected.encode())


async def require_admin_api_token(
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    """
    Guard the read-only admin endpoints with the x-admin-token header.

    Without ADMIN_API_TOKEN the endpoints are open outside production
    and closed in production.

    Raises:
        AdminAuthError: 401 on a missing or wrong token
    """
    expected = settings.ADMIN_API_TOKEN
    if not expected:
        if settings.is_production:
            logger.warning("Admin API called in production without ADMIN_API_TOKEN configured")
            raise AdminAuthError()
        return

    if not _tokens_match(x_admin_token, expected):
        logger.warning("Rejected admin API request with invalid token")
        raise AdminAuthError()


async def require_wipe_token(
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """
    Guard the destructive wipe endpoint with "Authorization: Bearer <ADMIN_TOKEN>".

    Always closed when ADMIN_TOKEN isn't configured.

    Raises:
        AdminAuthError: 401 on a missing or wrong token
    """
    token = ""
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):]

    if not settings.ADMIN_TOKEN or not _tokens_match(token, settings.ADMIN_TOKEN):
        logger.warning("Rejected admin wipe request with invalid token")
        raise AdminAuthError()


def get_webhook_handler() -> StripeWebhookHandler:
    """Get the Stripe webhook handler (overridable in tests)."""
    return StripeWebhookHandler()


# Type alias for dependency injection
WebhookHandlerDep = Annotated[StripeWebhookHandler, Depends(get_webhook_handler)]
