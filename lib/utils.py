# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application:
# - UUID normalization
# - Base error class for client-level errors
# - Shareable link slugs
# - Storage key sanitizing
# - Image resizing URLs
# =============================================================================

import random
import re
import string
import time
from typing import Any
from uuid import UUID


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Args:
        value: UUID as string or UUID object

    Returns:
        String representation of the UUID

    Example:
        user_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        user_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }


# =============================================================================
# Shareable Links
# =============================================================================

_BASE36 = string.digits + string.ascii_lowercase


def generate_shareable_link(now_ms: int | None = None) -> str:
    """
    Generate a public catalog slug.

    Format: catalog-<epoch millis>-<9 random base36 chars>

    Args:
        now_ms: Override the timestamp (tests)

    Returns:
        Slug such as "catalog-1718000000000-k3j9x0abq"
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"catalog-{now_ms}-{suffix}"


# =============================================================================
# Storage Keys
# =============================================================================

_SAFE_SEGMENT = re.compile(r"[^a-zA-Z0-9._-]+")


def sanitize_prefix(prefix: str | None) -> str:
    """
    Clean a folder prefix for use in a storage key.

    Drops empty, "." and ".." segments and replaces anything outside
    [a-zA-Z0-9._-] with "-".

    Example:
        sanitize_prefix("/products//new items/") -> "products/new-items"
    """
    if not prefix:
        return ""
    parts = []
    for segment in prefix.split("/"):
        segment = _SAFE_SEGMENT.sub("-", segment.strip())
        if segment in ("", ".", ".."):
            continue
        parts.append(segment)
    return "/".join(parts)


def sanitize_filename(filename: str | None, default: str = "image") -> str:
    """
    Clean a filename for use as the last segment of a storage key.

    Path separators are removed so the name can't escape its prefix.
    """
    if not filename:
        return default
    name = filename.replace("\\", "/").split("/")[-1]
    name = _SAFE_SEGMENT.sub("-", name).strip("-")
    if name in ("", ".", ".."):
        return default
    return name


# =============================================================================
# Image Resizing URLs
# =============================================================================

IMAGE_VARIANTS: dict[str, tuple[int, int]] = {
    "thumbnail": (400, 400),
    "medium": (600, 600),
    "large": (800, 800),
}


def get_optimized_image_url(
    image_url: str | None,
    width: int = 400,
    height: int = 400,
    quality: int = 85,
) -> str | None:
    """
    Build a Cloudflare image-resizing URL for a public image.

    Non-http URLs (blob:, data:, relative) and empty values are returned
    unchanged.

    Example:
        get_optimized_image_url("https://img.example.com/a/b.png", 400, 400)
        -> "https://img.example.com/cdn-cgi/image/width=400,height=400,quality=85,format=auto,fit=cover,gravity=auto/a/b.png"
    """
    if not image_url or not image_url.startswith(("http://", "https://")):
        return image_url

    scheme, _, rest = image_url.partition("://")
    host, slash, path = rest.partition("/")
    options = f"width={width},height={height},quality={quality},format=auto,fit=cover,gravity=auto"
    return f"{scheme}://{host}/cdn-cgi/image/{options}/{path if slash else ''}"


def get_image_variants(image_url: str | None) -> dict[str, str | None]:
    """Build thumbnail/medium/large URLs for an image."""
    return {
        name: get_optimized_image_url(image_url, width, height)
        for name, (width, height) in IMAGE_VARIANTS.items()
    }
