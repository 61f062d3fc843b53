# =============================================================================
# core/promos.py - Promo Codes
# =============================================================================
# Marketing promo codes that map to Stripe coupons of the same id.
# =============================================================================

from typing import Any

PROMO_CODES: dict[str, dict[str, str]] = {
    "WELCOME10": {
        "description": "Welcome Discount",
        "discount": "10% off first payment",
    },
    "SAVE20": {
        "description": "First Month Discount",
        "discount": "20% off first payment",
    },
    "EARLYBIRD": {
        "description": "Early Bird Special",
        "discount": "$5 off first payment",
    },
    "TEST50": {
        "description": "Test Discount",
        "discount": "50% off first payment",
    },
}


def get_promo_code(code: str | None) -> dict[str, str] | None:
    """Look up a promo code, case-insensitively."""
    if not code:
        return None
    return PROMO_CODES.get(code.strip().upper())


def generate_promo_link(code: str, base_url: str) -> dict[str, Any]:
    """
    Build the shareable landing link for a promo code.

    Raises:
        ValueError: If the code is unknown
    """
    details = get_promo_code(code)
    if details is None:
        raise ValueError(f"Invalid promo code: {code}")

    normalized = code.strip().upper()
    return {
        "code": normalized,
        "url": f"{base_url.rstrip('/')}/promo?code={normalized}",
        "description": details["description"],
        "discount": details["discount"],
    }
