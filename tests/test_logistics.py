"""
Tests for job orders and service assignments.
"""

import re
import pytest
from datetime import datetime, timedelta
from boohk.models import JobOrder, Notification, Quotation
from boohk.services.job_order import (
    create_job_orders,
    generate_jo_number,
    generate_personalized_jo_number,
    list_job_orders_for_product,
    user_initials,
)
from boohk.services.quotation import default_project_compliance
from boohk.services.service_assignment import (
    create_service_assignment,
    generate_sa_number,
    update_service_assignment,
)
from types import SimpleNamespace


class TestJobOrderNumbers:
    """Tests for JO number formats."""

    def test_plain_number(self):
        assert re.match(r"^JO-\d{13}-\d{3}$", generate_jo_number())

    def test_initials(self):
        user = SimpleNamespace(first_name="Juan", middle_name="Protacio", last_name="dela Cruz")
        assert user_initials(user) == "JPD"

    def test_initials_skip_blank_names(self):
        user = SimpleNamespace(first_name="ana", middle_name="  ", last_name=None)
        assert user_initials(user) == "A"

    def test_personalized_sequence(self, db, sales_user):
        assert generate_personalized_jo_number(db, sales_user) == "JD-0001"
        create_job_orders(db, [{"jo_type": "Installation"}], "pending", sales_user)
        assert generate_personalized_jo_number(db, sales_user) == "JD-0002"

    def test_falls_back_without_name(self, db):
        user = SimpleNamespace(id="u1", first_name="", middle_name=None, last_name=None)
        assert generate_personalized_jo_number(db, user).startswith("JO-")


class TestCreateJobOrders:
    """Tests for batch job order creation."""

    def test_batch_numbers_are_sequential(self, db, sales_user):
        created = create_job_orders(
            db,
            [{"jo_type": "Installation"}, {"jo_type": "Dismantling"}],
            "pending",
            sales_user,
        )
        assert [jo.jo_number for jo in created] == ["JD-0001", "JD-0002"]
        assert all(jo.company_id == "company-1" for jo in created)

    def test_compliance_snapshot(self, db, sales_user):
        compliance = default_project_compliance()
        compliance["signedQuotation"]["completed"] = True
        quotation = Quotation(
            quotation_number="QT-20240501-0002",
            company_id="company-1",
            status="reserved",
            project_compliance=compliance,
        )
        db.add(quotation)
        db.commit()

        [job_order] = create_job_orders(
            db, [{"jo_type": "Installation", "quotation_id": quotation.id}], "pending", sales_user
        )
        assert job_order.project_compliance["signedQuotation"]["completed"] is True
        assert "signedQuotation" not in job_order.missing_compliance
        assert len(job_order.missing_compliance) == 4

    def test_assignee_notified(self, db, sales_user, logistics_user):
        create_job_orders(
            db,
            [{"jo_type": "Repair", "assign_to": logistics_user.id, "site_name": "EDSA Guadalupe LED"}],
            "pending",
            sales_user,
        )
        notification = db.query(Notification).filter(Notification.user_id == logistics_user.id).one()
        assert notification.type == "job_order_assigned"
        assert "EDSA Guadalupe LED" in notification.message

    def test_self_assignment_not_notified(self, db, sales_user):
        create_job_orders(db, [{"jo_type": "Repair", "assign_to": sales_user.id}], "pending", sales_user)
        assert db.query(Notification).count() == 0

    @pytest.mark.parametrize("payload,status,message", [
        ({}, "pending", "jo_type is required"),
        ({"jo_type": "Painting"}, "pending", "Invalid job order type"),
        ({"jo_type": "Repair"}, "lost", "Invalid job order status"),
    ])
    def test_invalid_payloads(self, db, sales_user, payload, status, message):
        with pytest.raises(ValueError, match=message):
            create_job_orders(db, [payload], status, sales_user)
        assert db.query(JobOrder).count() == 0


class TestListJobOrdersForProduct:
    """Tests for cursor pagination of a site's job orders."""

    def _seed(self, db, count, product_id="site-1"):
        base = datetime(2024, 1, 1)
        for i in range(count):
            db.add(JobOrder(
                jo_number=f"JO-{i}",
                jo_type="Maintenance",
                product_id=product_id,
                created_at=base + timedelta(hours=i),
            ))
        db.add(JobOrder(jo_number="JO-other", jo_type="Repair", product_id="site-2", created_at=base))
        db.commit()

    def test_first_page_newest_first(self, db):
        self._seed(db, 12)
        page = list_job_orders_for_product(db, "site-1", page_size=10)

        numbers = [jo["jo_number"] for jo in page["jobOrders"]]
        assert numbers[0] == "JO-11"
        assert len(numbers) == 10
        assert page["hasNext"] is True

    def test_next_page_from_cursor(self, db):
        self._seed(db, 12)
        first = list_job_orders_for_product(db, "site-1", page_size=10)
        second = list_job_orders_for_product(db, "site-1", page_size=10, last_doc_id=first["lastDocId"])

        assert [jo["jo_number"] for jo in second["jobOrders"]] == ["JO-1", "JO-0"]
        assert second["hasNext"] is False

    def test_empty(self, db):
        page = list_job_orders_for_product(db, "nowhere")
        assert page == {"jobOrders": [], "hasNext": False, "lastDocId": None}


class TestServiceAssignments:
    """Tests for service assignment creation."""

    def test_sa_number(self):
        number = generate_sa_number()
        assert len(number) == 6
        assert 100000 <= int(number) <= 999999

    def test_filled_from_job_order(self, db, logistics_user):
        [job_order] = create_job_orders(
            db,
            [{"jo_type": "Installation", "product_id": "site-1", "booking_id": "b-1", "site_name": "C5 Static"}],
            "approved",
            logistics_user,
        )
        assignment = create_service_assignment(
            db, {"service_type": "Installation", "job_order_id": job_order.id}, logistics_user
        )
        assert assignment.status == "Draft"
        assert assignment.product_id == "site-1"
        assert assignment.booking_id == "b-1"
        assert assignment.site_name == "C5 Static"

    def test_missing_job_order(self, db, logistics_user):
        with pytest.raises(ValueError, match="Job order not found"):
            create_service_assignment(
                db, {"service_type": "Installation", "job_order_id": "missing"}, logistics_user
            )

    def test_invalid_service_type(self, db, logistics_user):
        with pytest.raises(ValueError, match="Invalid service type"):
            create_service_assignment(db, {"service_type": "Catering"}, logistics_user)

    def test_invalid_status_update(self, db, logistics_user):
        assignment = create_service_assignment(db, {"service_type": "Maintenance"}, logistics_user)
        with pytest.raises(ValueError, match="Invalid service assignment status"):
            update_service_assignment(db, assignment, {"status": "Paused"})
