"""
Integration tests for the JSON API: auth, the quotation client flow,
email sending, proposals with their temporary PDFs and parameter checks.
"""

import pytest
from unittest.mock import patch
from conftest import login_as, make_user
from boohk.models import Quotation
from boohk.services import mailer


def create_quotation(client, product, **overrides):
    body = {
        "product_id": product.id,
        "client_name": "Maria Clara",
        "client_email": "maria@acme.ph",
        "start_date": "2024-04-01",
        "end_date": "2024-04-30",
    }
    body.update(overrides)
    response = client.post("/api/quotations", json=body)
    assert response.status_code == 200, response.text
    return response.json()["quotation"]


class TestAuth:
    """Tests for login and role checks."""

    def test_requires_login(self, client):
        response = client.get("/api/quotations?companyId=company-1")
        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}

    def test_wrong_department(self, client, logistics_user):
        login_as(client, logistics_user)
        response = client.get("/api/quotations?companyId=company-1")
        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions"}

    def test_admin_passes_role_checks(self, client, admin_user):
        login_as(client, admin_user)
        response = client.get("/api/quotations?companyId=company-1")
        assert response.status_code == 200

    def test_login_sets_session(self, client, sales_user):
        response = client.post("/api/auth/login", json={"email": "Sales@example.com", "password": "password123"})
        assert response.status_code == 200
        assert "session" in response.cookies

        me = client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["email"] == "sales@example.com"

    def test_login_wrong_password(self, client, sales_user):
        response = client.post("/api/auth/login", json={"email": "sales@example.com", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    def test_inactive_user_rejected(self, client, db):
        user = make_user(db, "former@example.com", ["sales"])
        user.is_active = False
        db.commit()
        login_as(client, user)
        assert client.get("/api/auth/me").status_code == 401


class TestRequestChecks:
    """Tests for 400 responses on missing or malformed input."""

    def test_company_id_required(self, sales_client):
        response = sales_client.get("/api/quotations")
        assert response.status_code == 400
        assert response.json() == {"error": "companyId is required"}

    def test_body_validation_error(self, sales_client):
        response = sales_client.post("/api/quotations", json={})
        assert response.status_code == 400
        assert "product_id" in response.json()["error"]

    def test_bad_date(self, sales_client, product):
        response = sales_client.post(
            "/api/quotations", json={"product_id": product.id, "start_date": "soon"}
        )
        assert response.status_code == 400

    def test_unknown_site(self, sales_client):
        response = sales_client.post("/api/quotations", json={"product_id": "missing"})
        assert response.status_code == 404
        assert response.json() == {"error": "Site not found"}

    def test_job_orders_need_product(self, client, logistics_user):
        login_as(client, logistics_user)
        response = client.get("/api/logistics/assignments/job-orders")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required parameter: productId"}

    def test_search_query_must_be_string(self, sales_client):
        response = sales_client.post("/api/search", json={"query": 42})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid query parameter"
        assert body["hits"] == []

    def test_search_not_configured(self, sales_client):
        response = sales_client.post("/api/search", json={"query": "edsa"})
        assert response.status_code == 500
        assert response.json()["nbHits"] == 0

    def test_weather_invalid_region(self, sales_client):
        response = sales_client.get("/api/weather/forecast?region=000000")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid location key"}

    def test_assistant_requires_messages(self, sales_client):
        response = sales_client.post("/api/assistant", json={"messages": []})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid messages format"}

    def test_assistant_not_configured(self, sales_client):
        response = sales_client.post("/api/assistant", json={"messages": [{"role": "user", "content": "Hi"}]})
        assert response.status_code == 500
        assert response.json() == {"error": "AI service not configured"}


class TestQuotationClientFlow:
    """Tests for the client-facing quotation lifecycle."""

    def test_public_view_marks_viewed_once(self, sales_client, product, db):
        quotation = create_quotation(sales_client, product)
        sales_client.patch(f"/api/quotations/{quotation['id']}/status", json={"status": "sent"})

        first = sales_client.get(f"/api/quotations/public/{quotation['id']}")
        assert first.status_code == 200
        viewed = first.json()["quotation"]
        assert viewed["status"] == "viewed"
        assert "password" not in viewed

        second = sales_client.get(f"/api/quotations/public/{quotation['id']}")
        assert second.json()["quotation"]["viewed_at"] == viewed["viewed_at"]

    def test_draft_not_marked_viewed(self, sales_client, product):
        quotation = create_quotation(sales_client, product)
        response = sales_client.get(f"/api/quotations/public/{quotation['id']}")
        assert response.json()["quotation"]["status"] == "draft"

    def test_accept_and_book(self, sales_client, product):
        quotation = create_quotation(sales_client, product)
        sales_client.patch(f"/api/quotations/{quotation['id']}/status", json={"status": "sent"})

        response = sales_client.post(
            f"/api/quotations/public/{quotation['id']}/respond", json={"action": "accept"}
        )
        assert response.json() == {"success": True, "status": "accepted"}

        booked = sales_client.post(f"/api/quotations/{quotation['id']}/book", json={"project_name": "Launch"})
        assert booked.status_code == 200
        assert booked.json()["booking"]["status"] == "RESERVED"
        assert sales_client.get(f"/api/quotations/{quotation['id']}").json()["status"] == "reserved"

    def test_cannot_book_unaccepted(self, sales_client, product):
        quotation = create_quotation(sales_client, product)
        response = sales_client.post(f"/api/quotations/{quotation['id']}/book", json={})
        assert response.status_code == 400

    def test_invalid_transition(self, sales_client, product):
        quotation = create_quotation(sales_client, product)
        response = sales_client.patch(f"/api/quotations/{quotation['id']}/status", json={"status": "accepted"})
        assert response.status_code == 400
        assert "Cannot change status" in response.json()["error"]

    def test_soft_delete(self, sales_client, product, db):
        quotation = create_quotation(sales_client, product)
        assert sales_client.delete(f"/api/quotations/{quotation['id']}").json() == {"success": True}
        assert sales_client.get(f"/api/quotations/{quotation['id']}").status_code == 404
        assert db.query(Quotation).filter(Quotation.id == quotation["id"]).one().deleted is True


class TestQuotationEmail:
    """Tests for emailing a quotation PDF."""

    def test_missing_address(self, sales_client, product):
        quotation = create_quotation(sales_client, product, client_email=None)
        response = sales_client.post(f"/api/quotations/{quotation['id']}/send-email", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing quotation or client email address"}

    def test_invalid_to(self, sales_client, product):
        quotation = create_quotation(sales_client, product)
        response = sales_client.post(f"/api/quotations/{quotation['id']}/send-email", json={"to": "maria"})
        assert response.json() == {"error": "Invalid 'To' email address format"}

    def test_invalid_cc(self, sales_client, product):
        quotation = create_quotation(sales_client, product)
        response = sales_client.post(
            f"/api/quotations/{quotation['id']}/send-email", json={"cc": ["ok@acme.ph", "bad"]}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid 'CC' email address format: bad"}

    def test_not_configured(self, sales_client, product, monkeypatch):
        monkeypatch.setattr(mailer, "RESEND_API_KEY", None)
        quotation = create_quotation(sales_client, product)
        response = sales_client.post(f"/api/quotations/{quotation['id']}/send-email", json={})
        assert response.status_code == 500
        assert response.json() == {"error": "Email service not configured"}

    def test_sends_pdf_and_marks_sent(self, sales_client, product, monkeypatch):
        monkeypatch.setattr(mailer, "RESEND_API_KEY", "re_test")
        quotation = create_quotation(sales_client, product)

        with patch.object(mailer, "send_email", return_value={"id": "email-1"}) as send:
            response = sales_client.post(f"/api/quotations/{quotation['id']}/send-email", json={})

        assert response.status_code == 200
        assert response.json()["status"] == "sent"
        args, kwargs = send.call_args
        assert args[0] == "maria@acme.ph"
        assert kwargs["reply_to"] == "sales@example.com"
        assert kwargs["attachments"][0]["filename"] == f"Quotation_{quotation['quotation_number']}.pdf"

    def test_pdf_download(self, sales_client, product):
        quotation = create_quotation(sales_client, product)
        response = sales_client.get(f"/api/quotations/{quotation['id']}/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")


class TestProposals:
    """Tests for password-protected proposals and temporary PDFs."""

    def _create(self, client):
        response = client.post("/api/proposals", json={
            "title": "Q3 Campaign",
            "client": {"company": "Acme Corp", "contactPerson": "Maria Clara", "email": "maria@acme.ph"},
            "products": [{"name": "EDSA Guadalupe LED", "price": 310000}],
        })
        assert response.status_code == 200, response.text
        return response.json()["proposal"]

    def test_public_view_wrong_password(self, sales_client):
        proposal = self._create(sales_client)
        response = sales_client.post(f"/api/proposals/public/{proposal['id']}", json={"password": "00000000x"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid password"}

    def test_public_view_logs_activity(self, sales_client):
        proposal = self._create(sales_client)
        response = sales_client.post(
            f"/api/proposals/public/{proposal['id']}", json={"password": proposal["password"]}
        )
        assert response.status_code == 200
        assert "password" not in response.json()["proposal"]

        activities = sales_client.get(f"/api/proposals/{proposal['id']}/activities").json()["activities"]
        assert {a["type"] for a in activities} >= {"created", "viewed"}

    def test_temp_pdf_single_download(self, sales_client):
        proposal = self._create(sales_client)

        handle = sales_client.post("/api/proposals/generate-temp-pdf", json={"proposalId": proposal["id"]}).json()
        assert handle["success"] is True
        assert handle["filename"] == f"OH_PROP_{proposal['id']}_Q3_Campaign.pdf"

        download = sales_client.get(f"/api/proposals/generate-temp-pdf?id={handle['tempId']}")
        assert download.status_code == 200
        assert download.content.startswith(b"%PDF")
        assert "attachment" in download.headers["content-disposition"]

        again = sales_client.get(f"/api/proposals/generate-temp-pdf?id={handle['tempId']}")
        assert again.status_code == 404
        assert again.json() == {"error": "Temp PDF not found or expired"}

    def test_temp_pdf_requires_id(self, sales_client):
        response = sales_client.post("/api/proposals/generate-temp-pdf", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required parameter: proposalId"}
