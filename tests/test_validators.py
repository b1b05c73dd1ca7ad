"""
Unit tests for data quality validators.
"""

import pytest
from boohk.models import Client, Product
from boohk.services.validators import (
    validate_client,
    validate_collectible,
    validate_password,
    validate_product,
    validate_quotation,
    validate_user,
)


class TestValidateClient:

    def test_valid(self, db):
        result = validate_client({"name": "Acme Corp", "company_id": "company-1"}, db)
        assert result.is_valid
        assert result.warnings == []

    def test_required_fields(self, db):
        result = validate_client({"name": "  "}, db)
        assert "Client name is required" in result.errors
        assert "Company is required" in result.errors

    def test_bad_email(self, db):
        result = validate_client({"name": "Acme", "company_id": "c", "email": "acme.ph"}, db)
        assert not result.is_valid

    def test_duplicate_email_warns(self, db):
        db.add(Client(company_id="company-1", name="Acme Corp", email="hello@acme.ph"))
        db.commit()

        result = validate_client(
            {"name": "Acme Again", "company_id": "company-1", "email": "HELLO@acme.ph"}, db
        )
        assert result.is_valid
        assert "Acme Corp" in result.warnings[0]

    def test_duplicate_ignores_self(self, db):
        client = Client(company_id="company-1", name="Acme Corp", email="hello@acme.ph")
        db.add(client)
        db.commit()

        result = validate_client(
            {"name": "Acme Corp", "company_id": "company-1", "email": "hello@acme.ph"}, db, existing_id=client.id
        )
        assert result.warnings == []


class TestValidateProduct:

    def test_invalid_type_and_price(self, db):
        result = validate_product({"name": "C5", "company_id": "c", "type": "hologram", "price": -1}, db)
        assert "Invalid site type: hologram" in result.errors
        assert "Price must be a non-negative number" in result.errors

    def test_duplicate_site_code_warns(self, db, product):
        result = validate_product({"name": "Other", "company_id": "company-1", "site_code": "edsa-001"}, db)
        assert result.is_valid
        assert "EDSA Guadalupe LED" in result.warnings[0]


class TestValidateQuotation:

    def test_requires_site(self):
        result = validate_quotation({})
        assert "Site is required" in result.errors

    def test_site_optional_on_update(self):
        assert validate_quotation({}, require_product=False).is_valid

    def test_end_before_start(self):
        result = validate_quotation({
            "product_id": "p1",
            "start_date": "2024-05-10",
            "end_date": "2024-05-01",
        })
        assert "End date cannot be before start date" in result.errors

    def test_bad_date(self):
        result = validate_quotation({"product_id": "p1", "start_date": "next week"})
        assert "Start date must be an ISO date" in result.errors

    def test_raise_if_invalid(self):
        with pytest.raises(ValueError, match="Site is required"):
            validate_quotation({}).raise_if_invalid()


class TestValidateCollectible:

    def test_unknown_status(self):
        result = validate_collectible({"company_id": "c", "status": "lost"})
        assert "Invalid collectible status: lost" in result.errors

    def test_partial_skips_company(self):
        assert validate_collectible({"status": "paid"}, partial=True).is_valid

    def test_negative_amount(self):
        result = validate_collectible({"company_id": "c", "total_amount": "-5"})
        assert "total_amount must be a non-negative number" in result.errors


class TestValidateUser:

    def test_short_password(self):
        assert not validate_password("short").is_valid

    def test_duplicate_email_blocks(self, db, sales_user):
        result = validate_user(
            {"email": "SALES@example.com", "first_name": "Other", "password": "password123"}, db
        )
        assert not result.is_valid
        assert "already exists" in result.errors[0]

    def test_unknown_role(self, db):
        result = validate_user(
            {"email": "new@example.com", "first_name": "New", "password": "password123", "roles": ["wizard"]}, db
        )
        assert result.errors == ["Unknown role: wizard"]
