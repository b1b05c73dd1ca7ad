"""
Unit tests for the quotation / cost estimate status lifecycle.
"""

import pytest
from datetime import datetime, timedelta
from types import SimpleNamespace
from boohk.services.lifecycle import (
    InvalidStatusTransition,
    apply_transition,
    can_transition,
    expire_if_past_valid_until,
    mark_viewed,
    record_client_response,
)

NOW = datetime(2024, 5, 1, 9, 0)


def make_doc(status="draft", valid_until=None):
    return SimpleNamespace(
        status=status,
        valid_until=valid_until,
        sent_at=None,
        viewed_at=None,
        responded_at=None,
        rejection_reason=None,
    )


class TestCanTransition:
    """Tests for the allowed status moves."""

    @pytest.mark.parametrize("current,new", [
        ("draft", "sent"),
        ("sent", "viewed"),
        ("sent", "accepted"),
        ("viewed", "rejected"),
        ("viewed", "expired"),
        ("accepted", "reserved"),
    ])
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize("current,new", [
        ("draft", "accepted"),
        ("viewed", "sent"),
        ("rejected", "accepted"),
        ("expired", "viewed"),
        ("reserved", "accepted"),
    ])
    def test_not_allowed(self, current, new):
        assert not can_transition(current, new)

    def test_same_status_allowed(self):
        assert can_transition("accepted", "accepted")


class TestApplyTransition:
    """Tests for applying status changes with timestamps."""

    def test_send_sets_sent_at(self):
        doc = make_doc("draft")
        assert apply_transition(doc, "sent", now=NOW) is True
        assert doc.status == "sent"
        assert doc.sent_at == NOW

    def test_response_sets_responded_at(self):
        doc = make_doc("viewed")
        apply_transition(doc, "accepted", now=NOW)
        assert doc.responded_at == NOW

    def test_same_status_is_noop(self):
        doc = make_doc("sent")
        assert apply_transition(doc, "sent", now=NOW) is False
        assert doc.sent_at is None

    def test_invalid_move_raises(self):
        doc = make_doc("draft")
        with pytest.raises(InvalidStatusTransition) as exc_info:
            apply_transition(doc, "accepted")
        assert "draft" in str(exc_info.value)
        assert doc.status == "draft"

    def test_unknown_status_for_document_type(self):
        """Statuses outside the document's list are rejected even if reachable."""
        doc = make_doc("accepted")
        with pytest.raises(InvalidStatusTransition):
            apply_transition(doc, "reserved", allowed_statuses=["draft", "sent", "accepted"])

    def test_invalid_transition_is_value_error(self):
        assert issubclass(InvalidStatusTransition, ValueError)


class TestMarkViewed:
    """A sent document becomes viewed exactly once."""

    def test_sent_becomes_viewed(self):
        doc = make_doc("sent")
        assert mark_viewed(doc, now=NOW) is True
        assert doc.status == "viewed"
        assert doc.viewed_at == NOW

    def test_second_view_does_nothing(self):
        doc = make_doc("sent")
        mark_viewed(doc, now=NOW)
        later = NOW + timedelta(hours=1)
        assert mark_viewed(doc, now=later) is False
        assert doc.viewed_at == NOW

    @pytest.mark.parametrize("status", ["draft", "accepted", "rejected", "expired", "reserved"])
    def test_other_statuses_unchanged(self, status):
        doc = make_doc(status)
        assert mark_viewed(doc, now=NOW) is False
        assert doc.status == status


class TestExpiry:
    """Tests for validity window expiry."""

    def test_expires_when_past_valid_until(self):
        doc = make_doc("sent", valid_until=NOW - timedelta(days=1))
        assert expire_if_past_valid_until(doc, now=NOW) is True
        assert doc.status == "expired"

    def test_not_expired_within_window(self):
        doc = make_doc("viewed", valid_until=NOW + timedelta(days=1))
        assert expire_if_past_valid_until(doc, now=NOW) is False
        assert doc.status == "viewed"

    def test_accepted_never_expires(self):
        doc = make_doc("accepted", valid_until=NOW - timedelta(days=30))
        assert expire_if_past_valid_until(doc, now=NOW) is False

    def test_no_valid_until(self):
        doc = make_doc("sent")
        assert expire_if_past_valid_until(doc, now=NOW) is False


class TestClientResponse:
    """Tests for client accept/reject."""

    def test_accept(self):
        doc = make_doc("viewed")
        assert record_client_response(doc, "accept", now=NOW) == "accepted"
        assert doc.status == "accepted"

    def test_reject_records_reason(self):
        doc = make_doc("sent")
        assert record_client_response(doc, "REJECT", "  Over budget ", now=NOW) == "rejected"
        assert doc.rejection_reason == "Over budget"

    def test_blank_reason_stored_as_none(self):
        doc = make_doc("sent")
        record_client_response(doc, "reject", "   ", now=NOW)
        assert doc.rejection_reason is None

    def test_unknown_action(self):
        doc = make_doc("sent")
        with pytest.raises(ValueError, match="accept"):
            record_client_response(doc, "maybe")

    def test_draft_cannot_respond(self):
        doc = make_doc("draft")
        with pytest.raises(InvalidStatusTransition):
            record_client_response(doc, "accept")

    def test_cannot_respond_twice(self):
        doc = make_doc("viewed")
        record_client_response(doc, "accept", now=NOW)
        with pytest.raises(InvalidStatusTransition):
            record_client_response(doc, "reject", now=NOW)


class TestExpireDocumentsJob:
    """Tests for the scheduled expiry sweep."""

    def test_expires_stale_documents(self, db):
        from boohk.background_jobs import expire_documents_job
        from boohk.models import CostEstimate, Quotation

        stale = Quotation(
            quotation_number="QT-20240101-0001",
            company_id="company-1",
            status="sent",
            valid_until=datetime(2024, 1, 10),
        )
        accepted = Quotation(
            quotation_number="QT-20240101-0002",
            company_id="company-1",
            status="accepted",
            valid_until=datetime(2024, 1, 10),
        )
        estimate = CostEstimate(
            cost_estimate_number="CE-0001",
            company_id="company-1",
            title="Q1 Campaign",
            status="viewed",
            valid_until=datetime(2024, 1, 10),
        )
        db.add_all([stale, accepted, estimate])
        db.commit()

        assert expire_documents_job(db) == 2
        db.refresh(stale)
        db.refresh(accepted)
        db.refresh(estimate)
        assert stale.status == "expired"
        assert accepted.status == "accepted"
        assert estimate.status == "expired"


class TestJobRegistration:
    """Tests for how the scheduler registers its jobs."""

    def test_expiry_runs_daily(self):
        from apscheduler.triggers.cron import CronTrigger
        from boohk.background_jobs import BackgroundJobScheduler, EXPIRY_HOUR

        jobs = BackgroundJobScheduler()
        jobs.expiry_enabled = True
        jobs.temp_pdf_sweep_enabled = False
        jobs.register_jobs()

        job = jobs.scheduler.get_job("document_expiry_job")
        assert isinstance(job.trigger, CronTrigger)
        fields = {field.name: str(field) for field in job.trigger.fields}
        assert fields["hour"] == str(EXPIRY_HOUR)
        assert fields["minute"] == "0"
        assert jobs.scheduler.get_job("temp_pdf_sweep_job") is None
