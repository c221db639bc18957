# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the HTTP front-end:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - exceptions.py: Error taxonomy shared with core/
# - clients/: One controller per browser client (signed cookie)
# - auth/: Sign-up / sign-in / sign-out
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates to the
# TodoAppController in core/.
# =============================================================================
