"""
Tests for logistics service reports: creation, updates, listing filters,
per-booking lookups, the PDF and report emails.
"""

import re
import pytest
from datetime import datetime
from unittest.mock import patch
from conftest import login_as, make_user
from boohk.models import Report
from boohk.services import mailer, search
from boohk.services.report import (
    clean_attachments,
    completion_percentage,
    create_report,
    filter_reports,
    latest_reports_by_booking,
    post_report,
    report_search_record,
    report_type_display,
    reports_per_booking,
    update_report,
)

UPLOADED = {"fileName": "before.jpg", "fileUrl": "https://files.example/before.jpg", "fileType": "image/jpeg"}


def report_data(**overrides):
    data = {
        "report_type": "completion-report",
        "site_name": "EDSA Guadalupe LED",
        "booking_id": "booking-1",
        "client_name": "Acme Corp",
        "client_email": "maria@acme.ph",
        "attachments": [UPLOADED],
    }
    data.update(overrides)
    return data


class TestReportHelpers:
    """Tests for attachment cleanup and display helpers."""

    def test_unuploaded_attachments_dropped(self):
        cleaned = clean_attachments([
            UPLOADED,
            {"fileName": "pending.jpg"},
            {"fileUrl": "https://files.example/x.jpg"},
            None,
        ])
        assert cleaned == [{
            "note": "",
            "fileName": "before.jpg",
            "fileType": "image/jpeg",
            "fileUrl": "https://files.example/before.jpg",
        }]

    def test_attachment_defaults(self):
        cleaned = clean_attachments([{"fileName": "a.pdf", "fileUrl": "u", "label": "Before"}])
        assert cleaned[0]["fileType"] == "unknown"
        assert cleaned[0]["label"] == "Before"

    def test_type_display(self):
        assert report_type_display("installation-report") == "Installation Report"
        assert report_type_display(None) == "Report"

    @pytest.mark.parametrize("installation_status,stored,report_type,expected", [
        ("75", None, "installation-report", 75),
        ("soon", None, "installation-report", 0),
        (None, 40, "installation-report", 40),
        (None, None, "installation-report", 0),
        (None, None, "completion-report", 100),
    ])
    def test_completion_percentage(self, installation_status, stored, report_type, expected):
        report = Report(
            report_type=report_type,
            installation_status=installation_status,
            completion_percentage=stored,
        )
        assert completion_percentage(report) == expected


class TestCreateReport:
    """Tests for creating and posting reports."""

    def test_draft_with_number(self, db, logistics_user):
        report = create_report(db, report_data(), logistics_user)

        assert re.match(r"^RP-\d{13}$", report.report_number)
        assert report.status == "draft"
        assert report.company_id == "company-1"
        assert report.created_by_name == "Maria Santos"
        assert len(report.attachments) == 1

    def test_post_publishes(self, db, logistics_user):
        report = post_report(db, report_data(), logistics_user)
        assert report.status == "posted"

    def test_blank_optional_fields_dropped(self, db, logistics_user):
        report = create_report(
            db,
            report_data(delay_reason="   ", description_of_work="  Replaced two panels  "),
            logistics_user,
        )
        assert report.delay_reason is None
        assert report.description_of_work == "Replaced two panels"

    def test_invalid_type(self, db, logistics_user):
        with pytest.raises(ValueError, match="Invalid report type"):
            create_report(db, report_data(report_type="weekly"), logistics_user)

    def test_search_record(self, db, logistics_user):
        report = create_report(db, report_data(), logistics_user)
        record = report_search_record(report)
        assert record["objectID"] == report.id
        assert record["report_id"] == report.report_number
        assert record["reportType"] == "completion-report"


class TestUpdateReport:
    """Tests for partial updates."""

    def test_blank_values_leave_fields(self, db, logistics_user):
        report = create_report(db, report_data(), logistics_user)
        update_report(db, report, {"site_name": "", "location": None, "priority": "high"})

        assert report.site_name == "EDSA Guadalupe LED"
        assert report.priority == "high"

    def test_attachments_recleaned(self, db, logistics_user):
        report = create_report(db, report_data(), logistics_user)
        update_report(db, report, {"attachments": [{"fileName": "x.jpg"}]})
        assert report.attachments == []

    def test_invalid_status(self, db, logistics_user):
        report = create_report(db, report_data(), logistics_user)
        with pytest.raises(ValueError, match="Invalid report status"):
            update_report(db, report, {"status": "archived"})


class TestReportQueries:
    """Tests for listing filters and per-booking lookups."""

    def test_published_excludes_drafts(self, db, logistics_user):
        create_report(db, report_data(), logistics_user)
        posted = post_report(db, report_data(), logistics_user)

        rows = filter_reports(db.query(Report), status="published").all()
        assert [r.id for r in rows] == [posted.id]

    def test_all_disables_filters(self, db, logistics_user):
        create_report(db, report_data(), logistics_user)
        create_report(db, report_data(report_type="installation-report"), logistics_user)
        assert filter_reports(db.query(Report), status="all", report_type="All").count() == 2

    def test_search_matches_site_and_client(self, db, logistics_user):
        create_report(db, report_data(), logistics_user)
        create_report(db, report_data(site_name="Cebu IT Park", client_name="Globe"), logistics_user)

        assert filter_reports(db.query(Report), search_query="guadalupe").count() == 1
        assert filter_reports(db.query(Report), search_query="GLOBE").count() == 1
        assert filter_reports(db.query(Report), search_query="  ").count() == 2

    def test_latest_by_booking(self, db, logistics_user):
        older = create_report(db, report_data(), logistics_user)
        newer = create_report(db, report_data(), logistics_user)
        newer.created_at = datetime(2099, 1, 1)
        older.created_at = datetime(2024, 1, 1)
        db.commit()

        latest = latest_reports_by_booking(db, ["booking-1", "booking-2"])
        assert latest["booking-1"].id == newer.id
        assert latest["booking-2"] is None

    def test_grouped_per_booking(self, db, logistics_user):
        create_report(db, report_data(), logistics_user)
        create_report(db, report_data(), logistics_user)
        create_report(db, report_data(booking_id=None), logistics_user)

        grouped = reports_per_booking(db, "company-1")
        assert list(grouped) == ["booking-1"]
        assert len(grouped["booking-1"]) == 2


class TestReportRoutes:
    """Tests for the report API."""

    @pytest.fixture
    def logistics_client(self, client, logistics_user):
        return login_as(client, logistics_user)

    def _create(self, client, **overrides):
        body = report_data()
        body.update(overrides)
        response = client.post("/api/reports", json=body)
        assert response.status_code == 200, response.text
        return response.json()["report"]

    def test_create_and_list(self, logistics_client):
        report = self._create(logistics_client, post=True)
        assert report["status"] == "posted"

        listed = logistics_client.get("/api/reports?companyId=company-1&status=published").json()
        assert listed["total"] == 1
        assert listed["reports"][0]["id"] == report["id"]

    def test_invalid_type(self, logistics_client):
        response = logistics_client.post("/api/reports", json=report_data(report_type="weekly"))
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid report type: weekly"}

    def test_get_includes_completion(self, logistics_client):
        report = self._create(logistics_client, report_type="installation-report", installation_status="60")
        body = logistics_client.get(f"/api/reports/{report['id']}").json()
        assert body["completion"] == 60

    def test_other_company_forbidden(self, client, db, logistics_client):
        report = self._create(logistics_client)
        login_as(client, make_user(db, "crew@example.com", ["logistics"], "company-2"))
        assert client.get(f"/api/reports/{report['id']}").status_code == 403
        assert client.get("/api/reports?companyId=company-1").status_code == 403

    def test_delete_removes_from_index(self, logistics_client):
        report = self._create(logistics_client)
        with patch.object(search, "try_delete_object") as remove:
            assert logistics_client.delete(f"/api/reports/{report['id']}").json() == {"success": True}
        remove.assert_called_once_with("reports", report["id"])
        assert logistics_client.get(f"/api/reports/{report['id']}").status_code == 404

    def test_created_report_is_indexed(self, logistics_client):
        with patch.object(search, "try_save_object") as save:
            report = self._create(logistics_client)
        index, record = save.call_args[0]
        assert index == "reports"
        assert record["objectID"] == report["id"]

    def test_pdf(self, logistics_client):
        report = self._create(
            logistics_client, report_type="installation-report", delay_reason="Rain", delay_days="2"
        )
        response = logistics_client.get(f"/api/reports/{report['id']}/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_latest_by_booking(self, logistics_client):
        report = self._create(logistics_client)
        response = logistics_client.post(
            "/api/reports/latest-by-booking", json={"bookingIds": ["booking-1", "booking-9"]}
        )
        assert response.json()["reports"]["booking-1"]["id"] == report["id"]
        assert response.json()["reports"]["booking-9"] is None


class TestReportEmail:
    """Tests for emailing a report PDF to the client."""

    @pytest.fixture
    def logistics_client(self, client, logistics_user):
        return login_as(client, logistics_user)

    def _create(self, client, **overrides):
        body = report_data()
        body.update(overrides)
        return client.post("/api/reports", json=body).json()["report"]

    def test_missing_address(self, logistics_client):
        report = self._create(logistics_client, client_email=None)
        response = logistics_client.post(f"/api/reports/{report['id']}/send-email", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Missing report or client email address"}

    def test_invalid_cc(self, logistics_client):
        report = self._create(logistics_client)
        response = logistics_client.post(
            f"/api/reports/{report['id']}/send-email", json={"cc": ["ok@acme.ph", "bad"]}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid 'CC' email address format: bad"}

    def test_not_configured(self, logistics_client, monkeypatch):
        monkeypatch.setattr(mailer, "RESEND_API_KEY", None)
        report = self._create(logistics_client)
        response = logistics_client.post(f"/api/reports/{report['id']}/send-email", json={})
        assert response.status_code == 500
        assert response.json() == {"error": "Email service not configured"}

    def test_sends_pdf_and_records_email(self, logistics_client, monkeypatch):
        monkeypatch.setattr(mailer, "RESEND_API_KEY", "re_test")
        report = self._create(logistics_client)

        with patch.object(mailer, "send_email", return_value={"id": "email-1"}) as send, \
                patch.object(search, "try_save_object") as save:
            response = logistics_client.post(
                f"/api/reports/{report['id']}/send-email", json={"companyName": "Boohk Media"}
            )

        assert response.status_code == 200
        assert response.json()["message"] == "Email sent successfully with 1 attachment(s)"
        args, kwargs = send.call_args
        assert args[0] == "maria@acme.ph"
        assert args[1] == "Report: Completion Report - Boohk Media"
        assert kwargs["reply_to"] == "logistics@example.com"
        assert kwargs["attachments"][0]["filename"] == f"Report_{report['report_number']}.pdf"

        index, record = save.call_args[0]
        assert index == "emails"
        assert record["email_type"] == "report"
        assert record["reportId"] == report["id"]
        assert record["status"] == "sent"
