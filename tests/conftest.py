import os

# Configure before any boohk module reads the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-session-signing"
os.environ["TEMP_PDF_SWEEP_ENABLED"] = "false"
os.environ["DOCUMENT_EXPIRY_ENABLED"] = "false"
for name in ("ALGOLIA_APP_ID", "ALGOLIA_ADMIN_API_KEY", "RESEND_API_KEY", "ANTHROPIC_API_KEY"):
    os.environ.pop(name, None)

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from boohk.database import Base, engine, SessionLocal, get_db, init_db
from boohk.auth import hash_password, create_session_token, SESSION_COOKIE
from boohk.main import app
from boohk.models import User, Product


@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, email, roles, company_id="company-1", first_name="Juan", last_name="Dela Cruz"):
    user = User(
        email=email,
        password_hash=hash_password("password123"),
        first_name=first_name,
        last_name=last_name,
        company_id=company_id,
        roles=roles,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login_as(client, user):
    client.cookies.set(SESSION_COOKIE, create_session_token(user.id))
    return client


@pytest.fixture
def sales_user(db):
    return make_user(db, "sales@example.com", ["sales"])


@pytest.fixture
def logistics_user(db):
    return make_user(db, "logistics@example.com", ["logistics"], first_name="Maria", last_name="Santos")


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin@example.com", ["admin"], first_name="Ana", last_name="Reyes")


@pytest.fixture
def sales_client(client, sales_user):
    return login_as(client, sales_user)


@pytest.fixture
def product(db):
    site = Product(
        company_id="company-1",
        name="EDSA Guadalupe LED",
        site_code="EDSA-001",
        location="EDSA Guadalupe, Makati",
        type="digital",
        price=Decimal("310000.00"),
        specs={"cms": {"spots": 6}},
    )
    db.add(site)
    db.commit()
    db.refresh(site)
    return site
