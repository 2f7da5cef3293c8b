import os
import sys
import uuid
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from types import ModuleType

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import DateTime, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

# Settings are read from the environment at import time
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-with-at-least-32-characters"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["ASAAS_API_KEY"] = "test-asaas-key"
os.environ["ASAAS_WEBHOOK_TOKEN"] = "test-webhook-token"
os.environ["ASAAS_API_URL"] = "https://asaas.test/api/v3"

# Create a test engine BEFORE any app imports
_test_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


class TestBase(DeclarativeBase):
    pass


_TestSessionLocal = sessionmaker(bind=_test_engine, autoflush=False, autocommit=False)


class TimestampMixin:
    """Mixin that adds created_at / updated_at columns to any model."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


# Create a mock db module
mock_db_module = ModuleType("app.db")
mock_db_module.Base = TestBase
mock_db_module.TimestampMixin = TimestampMixin
mock_db_module.SessionLocal = _TestSessionLocal
mock_db_module.engine = _test_engine
mock_db_module.get_engine = lambda database_url=None: _test_engine

# Insert mock before any app imports
sys.modules["app.db"] = mock_db_module

# Now import the models - they'll use our mocked db module
from app.models.profile import Profile, SubscriptionStatus  # noqa: E402
from app.models.rental import (  # noqa: E402
    Property,
    Receipt,
    ReceiptKind,
    Tenant,
    TenantStatus,
)

# Create all tables
TestBase.metadata.create_all(_test_engine)

# Re-export Base for compatibility
Base = TestBase

# Valid check digits
VALID_CPF = "52998224725"


@pytest.fixture(scope="session")
def engine():
    return _test_engine


@pytest.fixture()
def db_session(engine):
    """Create a database session for testing.

    Uses the same connection as the StaticPool engine to ensure
    all operations see the same data.
    """
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex}@example.com"


@pytest.fixture()
def profile_factory(db_session):
    def _create(**overrides) -> Profile:
        values = {
            "full_name": "Carla Mendes",
            "email": _unique_email(),
            "cpf": VALID_CPF,
            "phone": "11988887777",
            "subscription_status": SubscriptionStatus.trial,
            "expires_at": datetime.now(UTC) + timedelta(days=7),
        }
        values.update(overrides)
        profile = Profile(**values)
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile

    return _create


@pytest.fixture()
def profile(profile_factory):
    return profile_factory()


@pytest.fixture()
def rental_factory(db_session):
    """Create a property with one tenant for an owner."""

    def _create(
        owner: Profile,
        due_day: int = 10,
        rent_amount: Decimal = Decimal("1500.00"),
        start_date: date | None = None,
        status: TenantStatus = TenantStatus.ativo,
        title: str | None = None,
        tenant_name: str = "Pedro Alves",
    ) -> Tenant:
        prop = Property(
            owner_id=owner.id,
            title=title,
            street="Rua Augusta",
            number="100",
            city="São Paulo",
            rent_amount=rent_amount,
        )
        tenant = Tenant(
            property=prop,
            full_name=tenant_name,
            due_day=due_day,
            rent_amount=rent_amount,
            start_date=start_date,
            status=status,
        )
        db_session.add_all([prop, tenant])
        db_session.commit()
        db_session.refresh(tenant)
        return tenant

    return _create


@pytest.fixture()
def receipt_factory(db_session):
    def _create(
        tenant: Tenant,
        reference_month: date,
        amount: Decimal | None = None,
        kind: ReceiptKind = ReceiptKind.pagamento,
    ) -> Receipt:
        receipt = Receipt(
            tenant_id=tenant.id,
            property_id=tenant.property_id,
            kind=kind,
            reference_month=reference_month,
            amount=tenant.rent_amount if amount is None else amount,
        )
        db_session.add(receipt)
        db_session.commit()
        db_session.refresh(receipt)
        return receipt

    return _create


# ============ FastAPI Test Client Fixtures ============


@pytest.fixture()
def client(db_session):
    """Create a test client with database dependency override."""
    from app.api.deps import get_db as api_get_db
    from app.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[api_get_db] = override_get_db

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _create_access_token(subject: str, expires_in: timedelta = timedelta(minutes=15)) -> str:
    """Create a JWT shaped like the auth provider's access tokens."""
    secret = os.environ["JWT_SECRET"]
    algorithm = os.environ["JWT_ALGORITHM"]
    now = datetime.now(UTC)
    payload = {
        "sub": subject,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int((now + expires_in).timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


@pytest.fixture()
def auth_headers(profile):
    return {"Authorization": f"Bearer {_create_access_token(str(profile.id))}"}


@pytest.fixture()
def webhook_headers():
    return {"asaas-access-token": os.environ["ASAAS_WEBHOOK_TOKEN"]}


@pytest.fixture()
def token_factory():
    return _create_access_token
