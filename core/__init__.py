# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the front-end-agnostic client logic:
# - models/: Pydantic schemas and draft state
# - services/: Session, todo and image storage services
# - controller.py: TodoAppController, the single owner of client state
#
# Code in this package does not depend on FastAPI routing; the HTTP app and
# the terminal script both drive the same controller.
# =============================================================================
