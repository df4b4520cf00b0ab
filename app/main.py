# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the LoanLink API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import LoanLinkException, loanlink_exception_handler
from app.routers import health, users, loans, applications, payments, messages
from app.auth import routes as auth_routes
from lib.mongo_client import MongoConnection, ensure_indexes

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

    - Startup: connect to MongoDB, confirm with a ping, ensure indexes
    - Shutdown: close the MongoDB client
    """
    logger.info(f"Starting LoanLink API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    await MongoConnection.ping()
    logger.info("Pinged your deployment. You successfully connected to MongoDB!")
    await ensure_indexes(MongoConnection.get_database())

    yield

    logger.info("Shutting down LoanLink API")
    MongoConnection.close()


# Create FastAPI application
app = FastAPI(
    title="LoanLink API",
    description="""
## Peer-to-peer loan marketplace API

| Role | Can |
|------|-----|
| **Borrower** | apply for loans, pay the application fee, track applications |
| **Manager** | publish loans, review applications |
| **Admin** | approve/suspend accounts and change roles |

New accounts are **pending** until an admin approves them.
Send the Supabase access token as `Authorization: Bearer <token>`.
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Token verification and the caller's account"},
        {"name": "Users", "description": "Signup, account lookups and admin changes"},
        {"name": "Loans", "description": "Loan listings"},
        {"name": "Applications", "description": "Loan applications and dashboard stats"},
        {"name": "Payments", "description": "Application fee checkout"},
        {"name": "Messages", "description": "Contact messages"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(LoanLinkException)
async def handle_loanlink_exception(request: Request, exc: LoanLinkException):
    """Handle custom LoanLink exceptions."""
    return await loanlink_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions (MongoDB, Stripe and other upstream failures)."""
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

app.include_router(auth_routes.router, prefix="/auth", tags=["Auth"])
app.include_router(users.router, tags=["Users"])
app.include_router(loans.router, tags=["Loans"])
app.include_router(applications.router, tags=["Applications"])
app.include_router(payments.router, tags=["Payments"])
app.include_router(messages.router, tags=["Messages"])
app.include_router(health.router, tags=["Health"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "LoanLink API",
        "message": "LoanLink is running",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
    )
