# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the todo client API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.clients import client_manager
from app.exceptions import (
    TodoAppException,
    todo_app_exception_handler,
    validation_exception_handler,
)
from app.routers import health, client, todos, draft
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: log configuration
    - Shutdown: close every client controller so no auth listener outlives
      the app
    """
    logger.info(f"Starting Todo API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    yield

    logger.info("Shutting down Todo API")
    client_manager.close_all()


# Create FastAPI application
app = FastAPI(
    title="Supabase Todos API",
    description="""
## Authenticated todo list backed by Supabase

Each browser client gets its own Supabase session, tracked with a signed
cookie. Rows are scoped to the signed-in user by row-level security.

### Quick Start

```bash
# 1. Sign in (keeps the client cookie in cookies.txt)
curl -c cookies.txt -b cookies.txt -X POST http://localhost:8000/api/v1/auth/signin \\
  -H "Content-Type: application/json" \\
  -d '{"email": "a@x.com", "password": "secret1"}'

# 2. Add a todo with an image
curl -b cookies.txt -X POST http://localhost:8000/api/v1/todos \\
  -F "task=Buy milk" -F "image=@milk.png"

# 3. Toggle it
curl -b cookies.txt -X POST http://localhost:8000/api/v1/todos/42/toggle
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Sign up, sign in and sign out",
        },
        {
            "name": "Client",
            "description": "Client state snapshot and teardown",
        },
        {
            "name": "Todos",
            "description": "List, add and toggle todos",
        },
        {
            "name": "Draft",
            "description": "Draft text and image before adding",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# Cookies carry the client id, so origins must be explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(TodoAppException)
async def handle_todo_app_exception(request: Request, exc: TodoAppException):
    """Handle custom todo client exceptions."""
    return await todo_app_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

app.include_router(
    client.router,
    prefix="/api/v1",
    tags=["Client"]
)

app.include_router(
    todos.router,
    prefix="/api/v1/todos",
    tags=["Todos"]
)

app.include_router(
    draft.router,
    prefix="/api/v1/draft",
    tags=["Draft"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Supabase Todos API",
        "version": "1.0.0",
        "docs": "/docs",
        "state": "/api/v1/state",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
    )
