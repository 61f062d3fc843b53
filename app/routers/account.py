# =============================================================================
# app/routers/account.py - Profile, Responses and Subscription Endpoints
# =============================================================================
# Per-user account views: company profile, all collected feedback,
# current plan with usage, the plan list and promo links.
# =============================================================================

from fastapi import APIRouter, Depends, HTTPException, Path

from app.auth import get_current_user, AuthUser
from app.config import settings
from core.models.company_profile import CompanyProfileUpdate
from core.promos import generate_promo_link
from core.services.profile_service import ProfileService
from core.services.response_service import ResponseService
from core.services.subscription_service import SubscriptionService

router = APIRouter()


# =============================================================================
# Company Profile
# =============================================================================

@router.get("/profile")
async def get_profile(user: AuthUser = Depends(get_current_user)):
    """Get the caller's company profile, or an empty profile."""
    profile = ProfileService.get_profile(user.id)
    return profile or {"user_id": str(user.id)}


@router.put("/profile")
async def save_profile(
    request: CompanyProfileUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Create or update the company profile. Omitted fields are kept."""
    return ProfileService.save_profile(user.id, request.model_dump(exclude_unset=True))


# =============================================================================
# Responses
# =============================================================================

@router.get("/responses")
async def list_responses(user: AuthUser = Depends(get_current_user)):
    """Feedback across all of the caller's catalogs, newest first."""
    responses = ResponseService.list_responses(user.id)
    return {"responses": responses, "count": len(responses)}


# =============================================================================
# Subscription
# =============================================================================

@router.get("/subscription")
async def get_subscription(user: AuthUser = Depends(get_current_user)):
    """Current plan, subscription row, usage and what the caller can still add."""
    return SubscriptionService.get_summary(user.id)


@router.get("/subscription/plans")
async def list_plans():
    """Available plans with their limits and prices."""
    return {"plans": SubscriptionService.list_plans()}


@router.get("/billing/promo/{code}")
async def get_promo_link(code: str = Path(..., min_length=1)):
    """Build a shareable promo link for a known promo code."""
    try:
        return generate_promo_link(code, settings.APP_BASE_URL)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
