# =============================================================================
# tests/test_applications.py - Loan Application Lifecycle Tests
# =============================================================================

from datetime import datetime, timezone

import pytest

from tests.conftest import auth_headers, run

from lib.mongo_client import APPLICATIONS, PAYMENTS
from lib.utils import to_object_id


BORROWER = "rafi@example.com"
MANAGER = "manager@example.com"


def stored_application(db, application_id):
    return run(db[APPLICATIONS].find_one({"_id": to_object_id(application_id)}))


class TestCreateApplication:

    def test_borrower_submits_application(self, client, db, add_user):
        add_user(BORROWER)

        response = client.post(
            "/loan-applications",
            json={
                "loanId": "6563b5f4e1a2c3d4e5f60718",
                "loanTitle": "Small Business Booster",
                "category": "Business",
                "interestRate": 9.5,
                "loanAmount": 12000,
                "firstName": "Rafi",
                "monthlyIncome": 1500,
                "userEmail": "someone-else@example.com",
                "status": "approved",
                "applicationFeeStatus": "paid",
            },
            headers=auth_headers(BORROWER),
        )

        assert response.status_code == 200
        stored = stored_application(db, response.json()["insertedId"])
        assert stored["userEmail"] == BORROWER
        assert stored["status"] == "pending"
        assert stored["applicationFeeStatus"] == "unpaid"
        assert stored["firstName"] == "Rafi"
        assert stored["monthlyIncome"] == 1500

    @pytest.mark.parametrize("role,status", [("manager", "approved"), ("borrower", "pending")])
    def test_only_approved_borrowers_apply(self, client, add_user, role, status):
        add_user("caller@example.com", role=role, status=status)
        response = client.post(
            "/loan-applications",
            json={"loanId": "6563b5f4e1a2c3d4e5f60718", "loanAmount": 100},
            headers=auth_headers("caller@example.com"),
        )
        assert response.status_code == 403

    def test_amount_must_be_positive(self, client, add_user):
        add_user(BORROWER)
        response = client.post(
            "/loan-applications",
            json={"loanId": "6563b5f4e1a2c3d4e5f60718", "loanAmount": 0},
            headers=auth_headers(BORROWER),
        )
        assert response.status_code == 422


class TestListApplications:

    def test_pagination_returns_page_and_total(self, client, add_user, add_application):
        add_user(MANAGER, role="manager")
        for i in range(12):
            add_application(BORROWER, loanAmount=1000 + i)

        response = client.get(
            "/loan-applications", params={"limit": 5, "skip": 5}, headers=auth_headers(MANAGER)
        )

        body = response.json()
        assert response.status_code == 200
        assert body["count"] == 12
        # Newest first: positions 6-10 are the 7th..3rd inserted
        assert [a["loanAmount"] for a in body["applications"]] == [1006, 1005, 1004, 1003, 1002]

    def test_borrower_sees_only_own(self, client, add_user, add_application):
        add_user(BORROWER)
        add_application(BORROWER)
        add_application("nila@example.com")
        add_application("nila@example.com")

        response = client.get(
            "/loan-applications",
            params={"email": "nila@example.com"},
            headers=auth_headers(BORROWER),
        )

        body = response.json()
        assert body["count"] == 1
        assert body["applications"][0]["userEmail"] == BORROWER

    def test_manager_filters_by_email_and_status(self, client, add_user, add_application):
        add_user(MANAGER, role="manager")
        add_application(BORROWER, status="approved")
        add_application(BORROWER, status="pending")
        add_application("nila@example.com", status="approved")

        response = client.get(
            "/loan-applications",
            params={"email": BORROWER, "status": "approved"},
            headers=auth_headers(MANAGER),
        )

        assert response.json()["count"] == 1

    def test_fee_status_filter_and_search(self, client, add_user, add_application):
        add_user(MANAGER, role="manager")
        add_application(BORROWER, applicationFeeStatus="paid", loanTitle="Home Renovation")
        add_application(BORROWER, applicationFeeStatus="unpaid", loanTitle="Home Renovation")
        add_application(BORROWER, applicationFeeStatus="paid", loanTitle="Car Loan", category="Vehicle")

        response = client.get(
            "/loan-applications",
            params={"applicationFeeStatus": "paid", "search": "renov"},
            headers=auth_headers(MANAGER),
        )

        assert response.json()["count"] == 1

    def test_pending_account_is_forbidden(self, client, add_user):
        add_user(BORROWER, status="pending")
        response = client.get("/loan-applications", headers=auth_headers(BORROWER))
        assert response.status_code == 403


class TestStatusLifecycle:

    def test_approve_stamps_approved_at(self, client, db, add_user, add_application):
        add_user(MANAGER, role="manager")
        application_id = add_application(BORROWER, applicationFeeStatus="paid")

        response = client.patch(
            f"/loan-applications/{application_id}",
            json={"status": "approved"},
            headers=auth_headers(MANAGER),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        stored = stored_application(db, application_id)
        assert stored["approvedAt"] is not None
        assert "rejectedAt" not in stored

    def test_reject_stamps_rejected_at(self, client, db, add_user, add_application):
        add_user("admin@example.com", role="admin")
        application_id = add_application(BORROWER)

        client.patch(
            f"/loan-applications/{application_id}",
            json={"status": "rejected"},
            headers=auth_headers("admin@example.com"),
        )

        stored = stored_application(db, application_id)
        assert stored["status"] == "rejected"
        assert stored["rejectedAt"] is not None

    def test_reapply_after_approval_resets_fee_and_removes_payment(
        self, client, db, add_user, add_application
    ):
        add_user(BORROWER)
        application_id = add_application(
            BORROWER, status="approved", applicationFeeStatus="paid", checkoutSessionIds=["cs_old"]
        )
        run(db[PAYMENTS].insert_one({
            "amount": 10.0,
            "currency": "usd",
            "borrowerEmail": BORROWER,
            "applicationId": application_id,
            "loanTitle": "Small Business Booster",
            "transactionId": "pi_old",
            "paymentStatus": "paid",
            "paidAt": datetime.now(timezone.utc),
        }))

        response = client.patch(
            f"/loan-applications/{application_id}",
            json={"status": "applied"},
            headers=auth_headers(BORROWER),
        )

        assert response.status_code == 200
        assert response.json()["applicationFeeStatus"] == "unpaid"
        assert response.json()["status"] == "applied"
        assert "checkoutSessionIds" not in stored_application(db, application_id)
        assert run(db[PAYMENTS].count_documents({"applicationId": application_id})) == 0

    def test_reapply_without_payment_is_fine(self, client, add_user, add_application):
        add_user(MANAGER, role="manager")
        application_id = add_application(BORROWER, status="rejected")

        response = client.patch(
            f"/loan-applications/{application_id}",
            json={"status": "applied"},
            headers=auth_headers(MANAGER),
        )

        assert response.status_code == 200
        assert response.json()["applicationFeeStatus"] == "unpaid"

    def test_reapply_keeps_other_applications_payments(self, client, db, add_user, add_application):
        add_user(BORROWER)
        mine = add_application(BORROWER, status="approved", applicationFeeStatus="paid")
        other = add_application(BORROWER, status="approved", applicationFeeStatus="paid")
        run(db[PAYMENTS].insert_one({"applicationId": other, "transactionId": "pi_other"}))

        client.patch(
            f"/loan-applications/{mine}", json={"status": "applied"}, headers=auth_headers(BORROWER)
        )

        assert run(db[PAYMENTS].count_documents({"applicationId": other})) == 1

    def test_borrower_cannot_approve(self, client, add_user, add_application):
        add_user(BORROWER)
        application_id = add_application(BORROWER)

        response = client.patch(
            f"/loan-applications/{application_id}",
            json={"status": "approved"},
            headers=auth_headers(BORROWER),
        )

        assert response.status_code == 403

    def test_borrower_cannot_reapply_for_someone_else(self, client, add_user, add_application):
        add_user(BORROWER)
        application_id = add_application("nila@example.com", status="rejected")

        response = client.patch(
            f"/loan-applications/{application_id}",
            json={"status": "applied"},
            headers=auth_headers(BORROWER),
        )

        assert response.status_code == 403

    def test_unknown_status_is_rejected(self, client, add_user, add_application):
        add_user(MANAGER, role="manager")
        application_id = add_application(BORROWER)
        response = client.patch(
            f"/loan-applications/{application_id}",
            json={"status": "archived"},
            headers=auth_headers(MANAGER),
        )
        assert response.status_code == 422

    def test_missing_application_is_not_found(self, client, add_user):
        add_user(MANAGER, role="manager")
        response = client.patch(
            "/loan-applications/6563b5f4e1a2c3d4e5f60718",
            json={"status": "approved"},
            headers=auth_headers(MANAGER),
        )
        assert response.status_code == 404
