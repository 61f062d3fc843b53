# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides shared helpers for:
# - Single-row lookups and row counts
# - Current plan state (user_plans) and plan history (user_subscriptions)
# - Stripe webhook idempotency (stripe_events)
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   plan = SupabaseClient.fetch_user_plan(user_id)
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        plan = SupabaseClient.fetch_user_plan("550e8400-...")
        products = SupabaseClient.count_rows(
            "products", {"user_id": "550e8400-..."}, exclude_archived=True
        )
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Every query must therefore filter by user_id itself.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Generic Lookups
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_one(
        cls,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch the first row matching all equality filters.

        Args:
            table: Table name
            filters: Column -> value equality filters
            columns: Columns to select

        Returns:
            Row dict, or None if nothing matches

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).select(columns)
            for column, value in filters.items():
                query = query.eq(column, cls._normalize_uuid(value))
            response = query.limit(1).execute()

            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table, "filters": {k: str(v) for k, v in filters.items()}}
            )

    @classmethod
    def count_rows(
        cls,
        table: str,
        filters: dict[str, Any],
        exclude_archived: bool = False,
    ) -> int:
        """
        Count rows matching all equality filters.

        Args:
            table: Table name
            filters: Column -> value equality filters
            exclude_archived: Only count rows whose archived_at is null

        Returns:
            Row count

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = client.table(table).select("id", count="exact", head=True)
            for column, value in filters.items():
                query = query.eq(column, cls._normalize_uuid(value))
            if exclude_archived:
                query = query.is_("archived_at", "null")
            response = query.execute()
            return response.count or 0

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to count {table}: {e}",
                code="COUNT_FAILED",
                details={"table": table}
            )

    # -------------------------------------------------------------------------
    # Plan State
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user_plan(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the current plan row for a user.

        Args:
            user_id: The user UUID

        Returns:
            user_plans row, or None if the user never subscribed
        """
        return cls.fetch_one("user_plans", {"user_id": user_id})

    @classmethod
    def upsert_user_plan(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert or replace the current plan row for a user.

        Args:
            data: user_plans row; must include user_id

        Returns:
            Stored row

        Raises:
            SupabaseClientError: If upsert fails
        """
        client = cls.get_client()
        data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}

        try:
            response = (
                client.table("user_plans")
                .upsert(data, on_conflict="user_id")
                .execute()
            )
            rows = response.data or []
            logger.debug(f"Upserted user plan for {data.get('user_id')}: {data.get('plan_id')}/{data.get('status')}")
            return rows[0] if rows else data

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to upsert user plan: {e}",
                code="UPSERT_PLAN_FAILED",
                suggestion="Check that the user_plans table has a unique constraint on user_id",
                details={"user_id": str(data.get("user_id"))}
            )

    @classmethod
    def insert_subscription_history(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Append a row to user_subscriptions.

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = (
                client.table("user_subscriptions")
                .insert(data)
                .execute()
            )
            rows = response.data or []
            return rows[0] if rows else data

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to record subscription history: {e}",
                code="INSERT_HISTORY_FAILED",
                details={"user_id": str(data.get("user_id"))}
            )

    # -------------------------------------------------------------------------
    # Webhook Idempotency
    # -------------------------------------------------------------------------

    @classmethod
    def has_processed_event(cls, event_id: str) -> bool:
        """Check whether a Stripe event was already handled."""
        return cls.fetch_one("stripe_events", {"id": event_id}, columns="id") is not None

    @classmethod
    def record_event(cls, event_id: str, event_type: str) -> None:
        """
        Remember a handled Stripe event.

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            client.table("stripe_events").upsert(
                {
                    "id": event_id,
                    "type": event_type,
                    "processed_at": datetime.now(timezone.utc).isoformat(),
                },
                on_conflict="id",
            ).execute()

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to record Stripe event: {e}",
                code="RECORD_EVENT_FAILED",
                suggestion="Check that the stripe_events table exists",
                details={"event_id": event_id}
            )
