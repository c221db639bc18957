# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Supabase Todos client:
# - test_models.py: Pydantic models, draft and preview handling
# - test_supabase_client.py: SDK wrapper with a mocked supabase Client
# - test_session_service.py / test_todo_service.py / test_storage_service.py:
#   services against the in-memory FakeBackend
# - test_controller.py: End-to-end client flow
# - test_clients.py / test_api.py: Client cookies, registry limits and HTTP routes
# - test_todo_interactive.py: Terminal front-end command handlers
#
# Run tests with: pytest
# =============================================================================
