"""
Tests for quotation creation, editing, compliance and booking.
"""

import re
import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch
from boohk.models import Booking, Quotation
from boohk.services import quotation as quotation_module
from boohk.services.lifecycle import InvalidStatusTransition
from boohk.services.quotation import (
    VALIDITY_DAYS,
    create_quotation,
    update_quotation,
    update_compliance_item,
    create_booking_from_quotation,
    generate_quotation_number,
    generate_password,
    unique_quotation_number,
    copy_quotation,
    pending_compliance_items,
    quotation_search_record,
)


def create(db, product, user, **overrides):
    data = {
        "client_name": "Maria Clara",
        "client_email": "maria@acme.ph",
        "client_company_name": "Acme Corp",
        "start_date": datetime(2024, 4, 1),
        "end_date": datetime(2024, 4, 30),
    }
    data.update(overrides)
    return create_quotation(db, data, product, user)


class TestNumbers:
    """Tests for generated identifiers."""

    def test_quotation_number_format(self):
        number = generate_quotation_number(datetime(2024, 5, 1, 10, 0))
        assert re.match(r"^QT-20240501-\d{4}$", number)

    def test_password_is_eight_digits(self):
        password = generate_password()
        assert len(password) == 8
        assert password.isdigit()

    def test_same_suffix_ten_seconds_apart(self, db, product, sales_user):
        """Two quotations whose epoch-ms suffixes match still get distinct numbers."""
        with patch.object(quotation_module, "epoch_ms", side_effect=[1700000001234, 1700000011234]):
            first = create(db, product, sales_user)
            second = create(db, product, sales_user)

        assert first.quotation_number.endswith("-1234")
        assert second.quotation_number != first.quotation_number
        assert re.match(r"^QT-\d{8}-\d{4}$", second.quotation_number)
        assert db.query(Quotation).count() == 2

    def test_unique_number_skips_taken(self, db, product, sales_user):
        existing = create(db, product, sales_user)
        with patch.object(quotation_module, "generate_quotation_number", return_value=existing.quotation_number):
            number = unique_quotation_number(db, datetime(2024, 5, 1))
        assert number != existing.quotation_number
        assert number.startswith("QT-20240501-")


class TestCreateQuotation:
    """Tests for creating a draft quotation."""

    def test_draft_with_snapshot_and_pricing(self, db, product, sales_user):
        quotation = create(db, product, sales_user)

        assert quotation.status == "draft"
        assert quotation.company_id == "company-1"
        assert quotation.items["name"] == "EDSA Guadalupe LED"
        assert quotation.items["cms"] == {"spots": 6}
        assert quotation.duration_days == 30
        assert quotation.total_amount == Decimal("310000.00")
        assert quotation.seller_id == sales_user.id
        assert len(quotation.password) == 8

    def test_valid_for_thirty_days(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        window = quotation.valid_until - quotation.created_at
        assert timedelta(days=VALIDITY_DAYS - 1) < window <= timedelta(days=VALIDITY_DAYS, seconds=1)

    def test_without_dates_uses_monthly_price(self, db, product, sales_user):
        quotation = create(db, product, sales_user, start_date=None, end_date=None)
        assert quotation.duration_days == 0
        assert quotation.total_amount == Decimal("310000.00")

    def test_compliance_checklist(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        assert set(quotation.project_compliance) == {
            "signedQuotation", "signedContract", "irrevocablePo", "finalArtwork", "paymentAsDeposit",
        }
        assert len(pending_compliance_items(quotation.project_compliance)) == 5

    def test_search_record(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        record = quotation_search_record(quotation)
        assert record["objectID"] == quotation.id
        assert record["total_amount"] == 310000.0
        assert "password" not in record


class TestUpdateQuotation:
    """Tests for editing an open quotation."""

    def test_repriced_when_dates_change(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        update_quotation(db, quotation, {"end_date": datetime(2024, 4, 15)})
        assert quotation.duration_days == 15
        assert quotation.total_amount == Decimal("155000.00")

    def test_price_override(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        update_quotation(db, quotation, {"price": 300000})
        assert quotation.items["price"] == 300000.0
        assert quotation.total_amount == Decimal("300000.00")

    def test_locked_after_response(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        quotation.status = "accepted"
        db.commit()
        with pytest.raises(ValueError, match="can no longer be edited"):
            update_quotation(db, quotation, {"notes": "late change"})

    def test_end_before_stored_start(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        with pytest.raises(ValueError, match="End date cannot be before start date"):
            update_quotation(db, quotation, {"end_date": datetime(2024, 3, 25)})
        assert quotation.end_date == datetime(2024, 4, 30)
        assert quotation.duration_days == 30

    def test_start_after_stored_end(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        with pytest.raises(ValueError, match="End date cannot be before start date"):
            update_quotation(db, quotation, {"start_date": datetime(2024, 5, 10)})

    def test_create_rejects_reversed_dates(self, db, product, sales_user):
        with pytest.raises(ValueError, match="End date cannot be before start date"):
            create(db, product, sales_user, start_date=datetime(2024, 4, 30), end_date=datetime(2024, 4, 1))
        assert db.query(Quotation).count() == 0


class TestCopyQuotation:
    """Tests for duplicating a quotation."""

    def test_copy_is_fresh_draft(self, db, product, sales_user):
        source = create(db, product, sales_user, notes="Rush order")
        source.status = "sent"
        db.commit()

        copy = copy_quotation(db, source, sales_user)

        assert copy.id != source.id
        assert copy.status == "draft"
        assert copy.quotation_number != source.quotation_number
        assert len(copy.password) == 8 and copy.password.isdigit()
        assert copy.total_amount == source.total_amount
        assert copy.items == source.items
        assert copy.notes == "Rush order"
        assert all(not item["completed"] for item in copy.project_compliance.values())


class TestCompliance:
    """Tests for compliance checklist updates."""

    def test_file_upload_completes_item(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        compliance = update_compliance_item(
            db, quotation, "signedContract", file_url="https://files.example/contract.pdf"
        )
        assert compliance["signedContract"]["completed"] is True
        assert "signedContract" not in pending_compliance_items(compliance)

    def test_mirrored_to_bookings(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        quotation.status = "accepted"
        db.commit()
        booking = create_booking_from_quotation(db, quotation, sales_user)

        update_compliance_item(db, quotation, "finalArtwork", completed=True)
        db.refresh(booking)
        assert booking.project_compliance["finalArtwork"]["completed"] is True

    def test_unknown_item(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        with pytest.raises(ValueError, match="Unknown compliance item"):
            update_compliance_item(db, quotation, "birthCertificate", completed=True)


class TestBooking:
    """Tests for reserving an accepted quotation."""

    def test_booking_created(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        quotation.status = "accepted"
        db.commit()

        booking = create_booking_from_quotation(db, quotation, sales_user, "Summer Campaign")

        assert quotation.status == "reserved"
        assert booking.status == "RESERVED"
        assert booking.reservation_id.startswith("RV-")
        assert booking.quotation_number == quotation.quotation_number
        assert booking.total_cost == Decimal("310000.00")
        assert booking.client["company_name"] == "Acme Corp"
        assert booking.project_name == "Summer Campaign"
        assert db.query(Booking).count() == 1

    def test_draft_cannot_be_booked(self, db, product, sales_user):
        quotation = create(db, product, sales_user)
        with pytest.raises(InvalidStatusTransition):
            create_booking_from_quotation(db, quotation, sales_user)
        assert db.query(Booking).count() == 0
