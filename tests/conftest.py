import os

# Must be set before slotwise.config.* is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from slotwise.config.database import SessionLocal, create_tables, drop_tables, get_db
from slotwise.models import (
    BlockedTime,
    Booking,
    BookingStatus,
    BusinessHours,
    PaymentMethod,
    Provider,
    Service,
    StaffAvailability,
    StaffMember,
    AvailabilityType,
    User,
    UserRole,
)
from slotwise.services.availability.interval import Interval
from slotwise.services.availability.types import (
    BusinessHoursRule,
    ProviderBlock,
    ProviderInfo,
    ServiceConfig,
    StaffBooking,
    StaffOverride,
    StaffRef,
)
from slotwise.services.rate_limit.rate_limit_store import InMemoryRateLimitStore

UTC = timezone.utc


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=UTC)


# ============================================================================
# In-memory ResourceStore for engine unit tests
# ============================================================================

class FakeResourceStore:
    """Dict-backed ResourceStore; bookings are (service_id, staff_id, Interval, status)"""

    def __init__(self):
        self.providers = {}
        self.services = {}
        self.hours = {}
        self.staff = {}
        self.assignments = set()
        self.bookings = []
        self.overrides = []
        self.blocks = []
        self.calls = []

    # builders

    def add_provider(self, tz=None, is_active=True) -> ProviderInfo:
        provider = ProviderInfo(id=uuid.uuid4(), timezone=tz, is_active=is_active)
        self.providers[provider.id] = provider
        return provider

    def add_service(self, provider, **kwargs) -> ServiceConfig:
        values = {"duration": 60}
        values.update(kwargs)
        service = ServiceConfig(id=uuid.uuid4(), provider_id=provider.id, **values)
        self.services[service.id] = service
        return service

    def set_hours(self, provider, *rules):
        self.hours[provider.id] = [BusinessHoursRule(*rule) for rule in rules]

    def add_staff(self, provider, is_active=True, services=()) -> StaffRef:
        staff = StaffRef(id=uuid.uuid4(), provider_id=provider.id, is_active=is_active)
        self.staff[staff.id] = staff
        for service in services:
            self.assignments.add((staff.id, service.id))
        return staff

    def add_booking(self, service, start, end, staff=None, status=BookingStatus.CONFIRMED):
        self.bookings.append((service.id, staff.id if staff else None, Interval(start, end), status))

    def add_override(self, staff, start, end, is_available):
        self.overrides.append(StaffOverride(staff_id=staff.id, interval=Interval(start, end), is_available=is_available))

    def add_block(self, provider, start, end, reason=None):
        self.blocks.append(ProviderBlock(provider_id=provider.id, interval=Interval(start, end), reason=reason))

    # ResourceStore

    def _active(self):
        return [b for b in self.bookings if b[3] not in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW)]

    def get_provider(self, provider_id):
        self.calls.append("get_provider")
        return self.providers.get(provider_id)

    def get_service(self, service_id):
        self.calls.append("get_service")
        return self.services.get(service_id)

    def get_business_hours(self, provider_id):
        self.calls.append("get_business_hours")
        return list(self.hours.get(provider_id, []))

    def count_active_bookings(self, service_id, window_start, window_end):
        window = Interval(window_start, window_end)
        return sum(1 for b in self._active() if b[0] == service_id and b[2].overlaps(window))

    def count_unassigned_bookings(self, service_id, window_start, window_end):
        window = Interval(window_start, window_end)
        return sum(
            1 for b in self._active()
            if b[0] == service_id and b[1] is None and b[2].overlaps(window)
        )

    def list_eligible_staff(self, provider_id, service_id, any_staff_member):
        staff = [s for s in self.staff.values() if s.provider_id == provider_id and s.is_active]
        if not any_staff_member:
            staff = [s for s in staff if (s.id, service_id) in self.assignments]
        return staff

    def list_staff_bookings(self, staff_ids, window_start, window_end):
        window = Interval(window_start, window_end)
        bookings = [
            StaffBooking(
                id=uuid.uuid4(),
                staff_id=b[1],
                interval=b[2],
                buffer_time_before=self.services[b[0]].buffer_time_before,
                buffer_time_after=self.services[b[0]].buffer_time_after,
            )
            for b in self._active()
            if b[1] in staff_ids
        ]
        return [b for b in bookings if b.effective_interval.overlaps(window)]

    def list_staff_overrides(self, staff_ids, window_start, window_end):
        window = Interval(window_start, window_end)
        return [o for o in self.overrides if o.staff_id in staff_ids and o.interval.overlaps(window)]

    def list_provider_blocks(self, provider_id, window_start, window_end):
        self.calls.append("list_provider_blocks")
        window = Interval(window_start, window_end)
        return [b for b in self.blocks if b.provider_id == provider_id and b.interval.overlaps(window)]


@pytest.fixture
def store():
    return FakeResourceStore()


# ============================================================================
# Database fixtures (in-memory SQLite)
# ============================================================================

@pytest.fixture
def db():
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_tables()


@pytest.fixture
def make_provider(db):
    def _make(email=None, tz=None, hours=None, is_active=True, username=None):
        email = email or f"owner-{uuid.uuid4().hex[:8]}@example.com"
        user = User(
            email=email,
            hashed_password="not-used",
            full_name="Test Owner",
            role=UserRole.PROVIDER,
            is_active=True
        )
        db.add(user)
        db.flush()

        provider = Provider(
            user_id=user.id,
            name="Test Owner",
            business_name="Test Studio",
            username=username or f"studio-{uuid.uuid4().hex[:8]}",
            timezone=tz,
            is_active=is_active
        )
        db.add(provider)
        db.flush()

        for dow, is_open, open_time, close_time in hours or []:
            db.add(BusinessHours(
                provider_id=provider.id,
                day_of_week=dow,
                is_open=is_open,
                open_time=open_time,
                close_time=close_time
            ))

        db.commit()
        return provider

    return _make


@pytest.fixture
def make_service(db):
    def _make(provider, **kwargs):
        values = {
            "name": "Haircut",
            "price": Decimal("500.00"),
            "duration": 60,
            "buffer_time_before": 0,
            "buffer_time_after": 0,
            "requires_staff": False,
            "any_staff_member": True,
            "max_concurrent": 1,
            "is_active": True,
        }
        values.update(kwargs)
        service = Service(provider_id=provider.id, **values)
        db.add(service)
        db.commit()
        return service

    return _make


@pytest.fixture
def make_staff(db):
    def _make(provider, name="Staff", services=(), is_active=True, staff_id=None):
        staff = StaffMember(
            id=staff_id or uuid.uuid4(),
            provider_id=provider.id,
            name=name,
            is_active=is_active
        )
        staff.services = list(services)
        db.add(staff)
        db.commit()
        return staff

    return _make


@pytest.fixture
def make_booking(db):
    def _make(service, start, staff=None, status=BookingStatus.CONFIRMED, email="customer@example.com", end=None):
        booking = Booking(
            provider_id=service.provider_id,
            service_id=service.id,
            staff_id=staff.id if staff else None,
            customer_name="Customer",
            customer_email=email,
            start_time=start,
            end_time=end or start + timedelta(minutes=service.duration),
            status=status,
            payment_method=PaymentMethod.CASH,
            total_amount=service.price,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def make_override(db):
    def _make(staff, start, end, availability_type=AvailabilityType.UNAVAILABLE):
        override = StaffAvailability(
            staff_id=staff.id,
            start_time=start,
            end_time=end,
            availability_type=availability_type
        )
        db.add(override)
        db.commit()
        return override

    return _make


@pytest.fixture
def make_block(db):
    def _make(provider, start, end, reason=None):
        block = BlockedTime(provider_id=provider.id, start_time=start, end_time=end, reason=reason)
        db.add(block)
        db.commit()
        return block

    return _make


# ============================================================================
# HTTP client
# ============================================================================

@pytest.fixture
def rate_limit_store():
    return InMemoryRateLimitStore()


@pytest.fixture
def client(db, rate_limit_store):
    from slotwise.main import create_app

    app = create_app(rate_limit_store=rate_limit_store)

    def _get_test_db():
        yield db

    app.dependency_overrides[get_db] = _get_test_db

    with TestClient(app) as test_client:
        yield test_client
