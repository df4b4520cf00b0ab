# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory MongoDB (mongomock-motor) in place of the real database
# - A fake payment gateway in place of Stripe
# - Real HS256 bearer tokens signed with the test JWT secret
# =============================================================================

import asyncio
import os
import time
from datetime import datetime, timedelta, timezone
from uuid import uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-for-loanlink-tests")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("SITE_DOMAIN", "http://localhost:5173")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from mongomock_motor import AsyncMongoMockClient

from app.config import settings
from app.dependencies import get_database, get_payment_gateway
from app.main import app
from lib.mongo_client import APPLICATIONS, LOANS, USERS, ensure_indexes
from lib.payment_gateway import CheckoutSession


def run(coro):
    """Run a coroutine from a synchronous test."""
    return asyncio.run(coro)


# =============================================================================
# Fakes
# =============================================================================

class FakeGateway:
    """Stands in for StripeGateway; sessions live in a dict."""

    def __init__(self):
        self.sessions: dict[str, CheckoutSession] = {}
        self.created: list[dict] = []

    async def create_checkout_session(self, **kwargs) -> CheckoutSession:
        session_id = f"cs_test_{len(self.sessions) + 1}"
        session = CheckoutSession(
            id=session_id,
            url=f"https://checkout.stripe.test/{session_id}",
            payment_status="unpaid",
            amount_total=kwargs["amount_cents"],
            currency=kwargs["currency"],
            customer_email=kwargs["customer_email"],
            metadata=kwargs["metadata"],
        )
        self.sessions[session_id] = session
        self.created.append(kwargs)
        return session

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        return self.sessions[session_id]

    def complete(self, session_id: str, payment_intent: str = "pi_test_123") -> None:
        """Mark a session as paid, as Stripe would after checkout."""
        self.sessions[session_id] = self.sessions[session_id].model_copy(
            update={"payment_status": "paid", "payment_intent": payment_intent}
        )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def db():
    """Fresh in-memory database with the production indexes."""
    database = AsyncMongoMockClient()["loanlink_test"]
    run(ensure_indexes(database))
    return database


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(db, gateway):
    """TestClient wired to the in-memory database and fake gateway."""
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(email: str, expires_in: int = 3600, secret: str | None = None) -> str:
    """Supabase-style access token."""
    now = int(time.time())
    claims = {
        "sub": str(uuid4()),
        "email": email,
        "aud": settings.JWT_AUDIENCE,
        "iat": now,
        "exp": now + expires_in,
        "role": "authenticated",
    }
    return jwt.encode(claims, secret or settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def auth_headers(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(email)}"}


@pytest.fixture
def add_user(db):
    """Insert a stored account directly; returns its id as a string."""

    def _add(email: str, role: str = "borrower", status: str = "approved", **fields) -> str:
        document = {
            "email": email,
            "displayName": fields.pop("displayName", email.split("@")[0].title()),
            "photoURL": None,
            "role": role,
            "status": status,
            "createdAt": datetime.now(timezone.utc),
            **fields,
        }
        result = run(db[USERS].insert_one(document))
        return str(result.inserted_id)

    return _add


@pytest.fixture
def add_loan(db):
    """Insert a loan directly; returns its id as a string."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _add(**fields) -> str:
        counter["n"] += 1
        document = {
            "title": f"Loan {counter['n']}",
            "description": "",
            "category": "Personal",
            "interestRate": 10.0,
            "maxLoanLimit": 10000,
            "emiPlans": ["12 months"],
            "image": None,
            "showOnHome": False,
            "createdAt": base + timedelta(minutes=counter["n"]),
            **fields,
        }
        result = run(db[LOANS].insert_one(document))
        return str(result.inserted_id)

    return _add


@pytest.fixture
def add_application(db):
    """Insert an application directly; returns its id as a string."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _add(user_email: str, **fields) -> str:
        counter["n"] += 1
        document = {
            "loanId": "6563b5f4e1a2c3d4e5f60718",
            "loanTitle": "Small Business Booster",
            "category": "Business",
            "interestRate": 9.5,
            "loanAmount": 5000,
            "userEmail": user_email,
            "status": "pending",
            "applicationFeeStatus": "unpaid",
            "createdAt": base + timedelta(minutes=counter["n"]),
            **fields,
        }
        result = run(db[APPLICATIONS].insert_one(document))
        return str(result.inserted_id)

    return _add
