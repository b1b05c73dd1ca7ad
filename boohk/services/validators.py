"""
Data Quality Validators

Centralized validation for clients, sites, fleet vehicles, quotations,
collectibles and users. Blocking problems are errors; likely duplicates
are warnings the caller may surface without refusing the save.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session

from boohk.models import Client, Product, FleetVehicle, Collectible, User
from boohk.services.mailer import is_valid_email
from boohk.timeutil import parse_datetime

MIN_PASSWORD_LENGTH = 8


class ValidationResult:
    """Container for validation results including warnings."""
    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def add_error(self, msg: str):
        self.errors.append(msg)

    def add_warning(self, msg: str):
        self.warnings.append(msg)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self):
        """Raise ValueError if there are blocking errors."""
        if self.errors:
            raise ValueError("; ".join(self.errors))


def _is_empty(value: Any) -> bool:
    """Check if value is None or empty string."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def _is_non_negative_number(value: Any) -> bool:
    try:
        return Decimal(str(value)) >= 0
    except (InvalidOperation, ValueError):
        return False


def _check_date(result: ValidationResult, value: Any, label: str):
    try:
        return parse_datetime(value)
    except (TypeError, ValueError):
        result.add_error(f"{label} must be an ISO date")
        return None


# ============================================================
# CLIENT VALIDATION
# ============================================================

def validate_client(
    data: Dict[str, Any],
    db: Session,
    existing_id: Optional[str] = None
) -> ValidationResult:
    """
    Validate client data.

    Required: name, company_id
    Block: malformed email
    Warn: another client in the same company with the same email
    """
    result = ValidationResult()

    if _is_empty(data.get("name")):
        result.add_error("Client name is required")

    if _is_empty(data.get("company_id")):
        result.add_error("Company is required")

    email = data.get("email", "").strip() if data.get("email") else ""
    if email and not is_valid_email(email):
        result.add_error(f"Invalid email address: {email}")

    if email and data.get("company_id"):
        query = db.query(Client).filter(
            Client.email.ilike(email),
            Client.company_id == data["company_id"],
            Client.deleted == False,
        )
        if existing_id:
            query = query.filter(Client.id != existing_id)

        dupe = query.first()
        if dupe:
            result.add_warning(f"A client with email '{email}' already exists: '{dupe.name}'")

    return result


# ============================================================
# PRODUCT (SITE) VALIDATION
# ============================================================

def validate_product(
    data: Dict[str, Any],
    db: Session,
    existing_id: Optional[str] = None
) -> ValidationResult:
    """
    Validate site data.

    Required: name, company_id
    Block: unknown type, negative price
    Warn: duplicate site code within the company
    """
    result = ValidationResult()

    if _is_empty(data.get("name")):
        result.add_error("Site name is required")

    if _is_empty(data.get("company_id")):
        result.add_error("Company is required")

    product_type = data.get("type")
    if product_type is not None and product_type not in Product.TYPES:
        result.add_error(f"Invalid site type: {product_type}")

    if data.get("price") is not None and not _is_non_negative_number(data["price"]):
        result.add_error("Price must be a non-negative number")

    site_code = data.get("site_code", "").strip() if data.get("site_code") else ""
    if site_code and data.get("company_id"):
        query = db.query(Product).filter(
            Product.site_code.ilike(site_code),
            Product.company_id == data["company_id"],
            Product.deleted == False,
        )
        if existing_id:
            query = query.filter(Product.id != existing_id)

        dupe = query.first()
        if dupe:
            result.add_warning(f"Site code '{site_code}' is already used by '{dupe.name}'")

    return result


# ============================================================
# FLEET VALIDATION
# ============================================================

def validate_fleet_vehicle(
    data: Dict[str, Any],
    db: Session,
    existing_id: Optional[str] = None
) -> ValidationResult:
    result = ValidationResult()

    if _is_empty(data.get("vehicle_number")):
        result.add_error("Vehicle number is required")

    status = data.get("status")
    if status is not None and status not in FleetVehicle.STATUSES:
        result.add_error(f"Invalid vehicle status: {status}")

    plate = data.get("plate_number", "").strip() if data.get("plate_number") else ""
    if plate and data.get("company_id"):
        query = db.query(FleetVehicle).filter(
            FleetVehicle.plate_number.ilike(plate),
            FleetVehicle.company_id == data["company_id"],
            FleetVehicle.deleted == False,
        )
        if existing_id:
            query = query.filter(FleetVehicle.id != existing_id)

        if query.first():
            result.add_warning(f"Plate number '{plate}' is already registered")

    return result


# ============================================================
# QUOTATION VALIDATION
# ============================================================

def validate_quotation(data: Dict[str, Any], require_product: bool = True) -> ValidationResult:
    """
    Validate a quotation payload.

    Required: product_id (on create)
    Block: malformed client email, unparseable dates, end before start
    """
    result = ValidationResult()

    if require_product and _is_empty(data.get("product_id")):
        result.add_error("Site is required")

    email = data.get("client_email")
    if not _is_empty(email) and not is_valid_email(email):
        result.add_error(f"Invalid client email address: {email}")

    start = _check_date(result, data.get("start_date"), "Start date")
    end = _check_date(result, data.get("end_date"), "End date")
    if start and end and end < start:
        result.add_error("End date cannot be before start date")

    return result


def validate_date_range(start, end) -> ValidationResult:
    """Block a booking window whose end falls before its start."""
    result = ValidationResult()
    if start and end and end < start:
        result.add_error("End date cannot be before start date")
    return result


# ============================================================
# COLLECTIBLE VALIDATION
# ============================================================

def validate_collectible(data: Dict[str, Any], partial: bool = False) -> ValidationResult:
    result = ValidationResult()

    if not partial and _is_empty(data.get("company_id")):
        result.add_error("Company is required")

    status = data.get("status")
    if status is not None and status not in Collectible.STATUSES:
        result.add_error(f"Invalid collectible status: {status}")

    collectible_type = data.get("type")
    if collectible_type is not None and collectible_type not in Collectible.TYPES:
        result.add_error(f"Invalid collectible type: {collectible_type}")

    for field in ("total_amount", "net_amount"):
        if data.get(field) is not None and not _is_non_negative_number(data[field]):
            result.add_error(f"{field} must be a non-negative number")

    return result


# ============================================================
# USER VALIDATION
# ============================================================

def validate_password(password: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        result.add_error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return result


def validate_roles(roles) -> ValidationResult:
    result = ValidationResult()
    for role in roles or []:
        if role not in User.ROLES:
            result.add_error(f"Unknown role: {role}")
    return result


def validate_user(data: Dict[str, Any], db: Session) -> ValidationResult:
    """
    Validate a new user.

    Required: email, first_name, password (8+ characters)
    Block: duplicate email, unknown roles
    """
    result = ValidationResult()

    email = data.get("email", "").strip() if data.get("email") else ""
    if not email:
        result.add_error("Email is required")
    elif not is_valid_email(email):
        result.add_error(f"Invalid email address: {email}")
    elif db.query(User).filter(User.email.ilike(email)).first():
        result.add_error(f"A user with email '{email}' already exists")

    if _is_empty(data.get("first_name")):
        result.add_error("First name is required")

    result.errors.extend(validate_password(data.get("password")).errors)
    result.errors.extend(validate_roles(data.get("roles")).errors)

    return result
