"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database. Notifications go to a
recording console provider so tests can assert on what would be emailed.
"""

from datetime import datetime
import os
from typing import Any, Callable, Dict, Iterator

# Configure settings before the application modules are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-slotkeeper")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")
os.environ.setdefault("EMAIL_PROVIDER", "console")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("NOTIFICATION_BACKOFF_SECONDS", "0")
os.environ.setdefault("BUSINESS_TIMEZONE", "UTC")

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from slotkeeper.api.dependencies.database import get_db  # noqa: E402
from slotkeeper.api.dependencies.services import get_event_publisher  # noqa: E402
from slotkeeper.auth import create_access_token  # noqa: E402
from slotkeeper.core.config import Settings  # noqa: E402
from slotkeeper.database import Base  # noqa: E402
from slotkeeper.events.handlers import build_event_publisher  # noqa: E402
from slotkeeper.events.publisher import EventPublisher  # noqa: E402
from slotkeeper.main import app  # noqa: E402
from slotkeeper.models.booking import Booking  # noqa: E402
from slotkeeper.principal import ROLE_ADMIN, ROLE_USER  # noqa: E402
from slotkeeper.services.booking_query_service import BookingQueryService  # noqa: E402
from slotkeeper.services.booking_service import BookingService  # noqa: E402
from slotkeeper.services.email_console import ConsoleEmailService  # noqa: E402
from slotkeeper.services.notification_service import NotificationService  # noqa: E402


@pytest.fixture
def engine() -> Iterator[Engine]:
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine: Engine) -> Iterator[Session]:
    """Fresh database session for each test."""
    TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestSessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        admin_email="admin@example.com",
        notification_max_attempts=3,
        notification_backoff_seconds=0,
        business_timezone="UTC",
        default_page_size=20,
        max_page_size=100,
    )


@pytest.fixture
def email_outbox() -> ConsoleEmailService:
    """Console provider that records every message it is asked to send."""
    return ConsoleEmailService(from_email="bookings@example.com")


@pytest.fixture
def notification_service(email_outbox: ConsoleEmailService, test_settings: Settings) -> NotificationService:
    return NotificationService(email_service=email_outbox, config=test_settings)


@pytest.fixture
def event_publisher(notification_service: NotificationService) -> EventPublisher:
    return build_event_publisher(notification_service)


@pytest.fixture
def booking_service(db: Session, event_publisher: EventPublisher) -> BookingService:
    return BookingService(db, event_publisher=event_publisher)


@pytest.fixture
def query_service(db: Session, test_settings: Settings) -> BookingQueryService:
    return BookingQueryService(db, config=test_settings)


@pytest.fixture
def make_booking(db: Session) -> Callable[..., Booking]:
    """Insert a booking directly, bypassing the service layer."""
    counter = {"n": 0}

    def _make(start: datetime, end: datetime, **overrides: Any) -> Booking:
        counter["n"] += 1
        fields: Dict[str, Any] = {
            "name": f"Requester {counter['n']}",
            "email": f"requester{counter['n']}@example.com",
            "phone": "+1 555 0100",
            "type": "consultation",
            "notes": None,
            "start_time": start,
            "end_time": end,
            "confirmed": False,
        }
        fields.update(overrides)
        booking = Booking(**fields)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


@pytest.fixture
def client(db: Session, event_publisher: EventPublisher) -> Iterator[TestClient]:
    """Create a test client with the test database and recording notifications."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_publisher] = lambda: event_publisher

    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    token = create_access_token("admin-1", role=ROLE_ADMIN)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers() -> Dict[str, str]:
    token = create_access_token("user-1", role=ROLE_USER)
    return {"Authorization": f"Bearer {token}"}
