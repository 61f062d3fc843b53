# =============================================================================
# core/models/company_profile.py - Company Profile Schemas
# =============================================================================

from pydantic import BaseModel, Field


class CompanyProfileUpdate(BaseModel):
    """
    Schema for saving the caller's company profile (one per user).

    Omitted fields keep their stored value.
    """

    company_name: str | None = Field(default=None, max_length=255)
    contact_person: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    logo_url: str | None = None
