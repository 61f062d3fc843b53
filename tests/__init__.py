# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Cuzata Catalog API:
# - conftest.py: In-memory Supabase stand-in, R2 mock, auth override
# - test_plans.py: Plan table, promos and pure helpers
# - test_*_service.py: Service-layer behavior against the fake database
# - test_routes.py / test_admin.py: HTTP endpoints via TestClient
# - test_workers.py: Scheduled maintenance tasks
#
# Run tests with: pytest
# =============================================================================
