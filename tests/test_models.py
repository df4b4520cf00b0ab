# =============================================================================
# tests/test_models.py - Model & Helper Tests
# =============================================================================
# Unit tests for the request models and the small helpers around them:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Query helpers never let user input become a regex or a bad ObjectId
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

import re

import pytest
from bson import ObjectId
from pydantic import ValidationError

from app.exceptions import InvalidObjectIdError
from core.models import (
    ApplicationCreate,
    ApplicationStatus,
    ApplicationStatusUpdate,
    CheckoutRequest,
    LoanCreate,
    LoanSort,
    LoanUpdate,
    MessageCreate,
    UserCreate,
    UserProfileUpdate,
    UserRoleUpdate,
)
from core.services.loan_service import SORT_SPECS, resolve_sort
from lib.payment_gateway import CheckoutSession, to_major_units
from lib.utils import serialize_document, text_search_filter, to_object_id


# =============================================================================
# User Models
# =============================================================================

class TestUserModels:

    def test_signup_defaults(self):
        user = UserCreate(email="rafi@example.com")
        assert user.role == "borrower"
        assert user.displayName is None

    def test_signup_rejects_admin(self):
        with pytest.raises(ValidationError):
            UserCreate(email="rafi@example.com", role="admin")

    def test_signup_rejects_bad_email(self):
        with pytest.raises(ValidationError):
            UserCreate(email="not-an-email")

    def test_role_update_accepts_partial(self):
        update = UserRoleUpdate(status="suspended")
        assert update.model_dump(exclude_none=True, mode="json") == {"status": "suspended"}

    def test_profile_update_ignores_role(self):
        update = UserProfileUpdate(displayName="Rafi", role="admin")
        assert "role" not in update.model_dump()


# =============================================================================
# Loan Models
# =============================================================================

class TestLoanModels:

    def test_valid_loan(self):
        loan = LoanCreate(title="Bridge", category="Home", interestRate=0, maxLoanLimit=100)
        assert loan.showOnHome is False
        assert loan.emiPlans == []

    @pytest.mark.parametrize("field,value", [
        ("interestRate", -0.5),
        ("maxLoanLimit", 0),
        ("title", ""),
    ])
    def test_invalid_loan(self, field, value):
        data = {"title": "Bridge", "category": "Home", "interestRate": 5, "maxLoanLimit": 100}
        data[field] = value
        with pytest.raises(ValidationError):
            LoanCreate(**data)

    def test_update_tracks_only_sent_fields(self):
        update = LoanUpdate(title="New")
        assert update.model_dump(exclude_unset=True) == {"title": "New"}

    def test_every_sort_key_is_mapped(self):
        assert set(SORT_SPECS) == set(LoanSort)

    @pytest.mark.parametrize("requested,expected", [
        ("interestLow", LoanSort.INTEREST_LOW),
        ("limitHigh", LoanSort.LIMIT_HIGH),
        ("latest", LoanSort.LATEST),
        ("$where", LoanSort.LATEST),
        (None, LoanSort.LATEST),
    ])
    def test_resolve_sort(self, requested, expected):
        assert resolve_sort(requested) is expected


# =============================================================================
# Application / Payment / Message Models
# =============================================================================

class TestApplicationModels:

    def test_extra_applicant_fields_are_kept(self):
        application = ApplicationCreate(
            loanId="6563b5f4e1a2c3d4e5f60718",
            loanAmount=2500,
            firstName="Rafi",
            reason="Restock inventory",
        )
        dumped = application.model_dump()
        assert dumped["firstName"] == "Rafi"
        assert dumped["reason"] == "Restock inventory"

    def test_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            ApplicationCreate(loanId="x", loanAmount=-1)

    def test_status_update_parses_enum(self):
        assert ApplicationStatusUpdate(status="applied").status is ApplicationStatus.APPLIED

    def test_status_update_rejects_unknown(self):
        with pytest.raises(ValidationError):
            ApplicationStatusUpdate(status="archived")

    def test_checkout_request_needs_application(self):
        with pytest.raises(ValidationError):
            CheckoutRequest()

    def test_message_keeps_extra_fields(self):
        message = MessageCreate(name="Nila", phone="+8801700000000")
        assert message.model_dump()["phone"] == "+8801700000000"


class TestCheckoutSession:

    def test_paid(self):
        assert CheckoutSession(id="cs_1", payment_status="paid").is_paid

    @pytest.mark.parametrize("status", ["unpaid", "no_payment_required", None])
    def test_not_paid(self, status):
        assert not CheckoutSession(id="cs_1", payment_status=status).is_paid

    @pytest.mark.parametrize("amount,currency,expected", [
        (1000, "usd", 10.0),
        (1050, "EUR", 10.5),
        (1000, "jpy", 1000.0),
        (500, "KRW", 500.0),
        (1000, None, 10.0),
    ])
    def test_to_major_units(self, amount, currency, expected):
        assert to_major_units(amount, currency) == expected


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:

    def test_to_object_id(self):
        oid = ObjectId()
        assert to_object_id(str(oid)) == oid
        assert to_object_id(oid) is oid

    @pytest.mark.parametrize("value", ["not-an-id", "123", ""])
    def test_to_object_id_rejects_malformed(self, value):
        with pytest.raises(InvalidObjectIdError) as exc_info:
            to_object_id(value)
        assert exc_info.value.status_code == 400

    def test_search_filter_escapes_input(self):
        query = text_search_filter("a.b*", ["title", "category"])

        patterns = [clause[field]["$regex"] for clause in query["$or"] for field in clause]
        assert patterns == [re.escape("a.b*")] * 2
        assert all(
            clause[field]["$options"] == "i" for clause in query["$or"] for field in clause
        )

    @pytest.mark.parametrize("term", [None, "", "   "])
    def test_blank_search_is_no_filter(self, term):
        assert text_search_filter(term, ["title"]) == {}

    def test_serialize_document_stringifies_nested_ids(self):
        oid = ObjectId()
        document = {"_id": oid, "refs": [oid], "owner": {"id": oid}, "n": 1}

        assert serialize_document(document) == {
            "_id": str(oid),
            "refs": [str(oid)],
            "owner": {"id": str(oid)},
            "n": 1,
        }

    def test_serialize_none(self):
        assert serialize_document(None) is None
