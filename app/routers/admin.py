# =============================================================================
# app/routers/admin.py - Operator Endpoints
# =============================================================================
#   GET  /api/admin-analytics  (x-admin-token)
#   GET  /api/admin-users      (x-admin-token)
#   POST /api/admin-wipe       (Authorization: Bearer <ADMIN_TOKEN>)
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Query

from app.dependencies import require_admin_api_token, require_wipe_token
from app.exceptions import ConfirmationRequiredError
from core.models.billing import AdminWipeRequest
from core.services.admin_service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin-analytics", dependencies=[Depends(require_admin_api_token)])
async def admin_analytics():
    """Platform totals, plan breakdown and top users by products and catalogs."""
    return AdminService.get_analytics()


@router.get("/admin-users", dependencies=[Depends(require_admin_api_token)])
async def admin_users(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=1000, ge=1, le=1000),
):
    """Auth users with their plan and usage counts."""
    users = AdminService.list_users(page=page, per_page=per_page)
    return {"users": users, "count": len(users)}


@router.post("/admin-wipe", dependencies=[Depends(require_wipe_token)])
async def admin_wipe(request: AdminWipeRequest):
    """
    Delete all stored images and/or all application rows.

    Raises:
        400: CONFIRMATION_REQUIRED unless the body has "confirm": true
        401: ADMIN_UNAUTHORIZED on a missing or wrong bearer token
    """
    if not request.confirm:
        raise ConfirmationRequiredError()

    results = AdminService.wipe(request.scope)
    logger.warning(f"Admin wipe completed (scope={request.scope})")
    return {"ok": True, "scope": request.scope, **results}
