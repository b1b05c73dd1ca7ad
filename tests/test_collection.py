"""
Tests for the quotation collection status rollup.
"""

import pytest
from decimal import Decimal
from boohk.models import Collectible, Quotation
from boohk.services.collection import (
    calculate_collection_status,
    update_quotation_collection_status,
    sync_collection_status_for_collectible,
)


def row(status, amount=1000):
    return {"status": status, "total_amount": amount}


class TestCalculateCollectionStatus:
    """Tests for the rollup rules."""

    def test_all_paid(self):
        result = calculate_collection_status([row("paid"), row("paid")])
        assert result["status"] == "fully_paid"
        assert result["progress"] == 100

    def test_paid_and_collected(self):
        result = calculate_collection_status([row("paid"), row("collected")])
        assert result["status"] == "fully_collected"
        assert result["progress"] == 100

    def test_overdue_takes_priority_over_partial(self):
        result = calculate_collection_status([row("paid"), row("overdue"), row("pending")])
        assert result["status"] == "partially_overdue"
        assert result["progress"] == 33

    def test_partially_collected(self):
        result = calculate_collection_status([row("collected"), row("pending")])
        assert result["status"] == "partially_collected"
        assert result["progress"] == 50

    def test_nothing_collected(self):
        result = calculate_collection_status([row("pending"), row("pending")])
        assert result["status"] == "pending_collection"
        assert result["progress"] == 0

    def test_empty(self):
        result = calculate_collection_status([])
        assert result["status"] == "pending_collection"
        assert result["progress"] == 0

    def test_progress_rounds_half_up(self):
        # 1 of 8 done = 12.5%
        rows = [row("paid")] + [row("pending")] * 7
        assert calculate_collection_status(rows)["progress"] == 13

    def test_amount_totals(self):
        result = calculate_collection_status([
            row("paid", "1500.50"),
            row("collected", 500),
            row("pending", 250),
            row("overdue", 250.25),
        ])
        assert result["total_collected"] == Decimal("2000.50")
        assert result["total_pending"] == Decimal("500.25")
        assert result["counts"] == {"pending": 1, "collected": 1, "overdue": 1, "paid": 1}

    def test_missing_status_counts_as_pending(self):
        result = calculate_collection_status([row(None, 400), row("paid", 600)])
        assert result["counts"]["pending"] == 1
        assert result["total_pending"] == Decimal("400")
        assert result["status"] == "partially_collected"


class TestUpdateQuotationCollectionStatus:
    """Tests for storing the rollup on the quotation."""

    def _quotation(self, db):
        quotation = Quotation(quotation_number="QT-20240501-0001", company_id="company-1", status="reserved")
        db.add(quotation)
        db.commit()
        return quotation

    def _collectible(self, db, quotation, status, amount, deleted=False):
        collectible = Collectible(
            company_id="company-1",
            quotation_id=quotation.id,
            client_name="Acme Corp",
            total_amount=Decimal(str(amount)),
            status=status,
            deleted=deleted,
        )
        db.add(collectible)
        db.commit()
        return collectible

    def test_stores_rollup(self, db):
        quotation = self._quotation(db)
        self._collectible(db, quotation, "paid", 1000)
        self._collectible(db, quotation, "pending", 3000)

        summary = update_quotation_collection_status(db, quotation.id)

        db.refresh(quotation)
        assert summary["status"] == "partially_collected"
        assert quotation.collection_status == "partially_collected"
        assert quotation.collection_progress == 50
        assert quotation.total_collected_amount == Decimal("1000.00")
        assert quotation.total_pending_amount == Decimal("3000.00")

    def test_deleted_collectibles_ignored(self, db):
        quotation = self._quotation(db)
        self._collectible(db, quotation, "paid", 1000)
        self._collectible(db, quotation, "overdue", 1000, deleted=True)

        summary = update_quotation_collection_status(db, quotation.id)
        assert summary["status"] == "fully_paid"

    def test_no_collectibles(self, db):
        quotation = self._quotation(db)
        assert update_quotation_collection_status(db, quotation.id) is None
        db.refresh(quotation)
        assert quotation.collection_status is None

    def test_sync_from_collectible(self, db):
        quotation = self._quotation(db)
        collectible = self._collectible(db, quotation, "collected", 500)

        summary = sync_collection_status_for_collectible(db, collectible.id)
        assert summary["status"] == "fully_collected"

    def test_sync_unknown_collectible(self, db):
        assert sync_collection_status_for_collectible(db, "missing") is None
