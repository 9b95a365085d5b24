import os
import uuid
from datetime import date, datetime, timezone

# Must be set before the application modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TESTING", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from propertech_scheduling.core.deps import Actor, ActorRole
from propertech_scheduling.core.security import create_access_token
from propertech_scheduling.database import get_db, init_db
from propertech_scheduling.main import app
from propertech_scheduling.models.property import Property, property_occupants
from propertech_scheduling.services.follow_up_service import FollowUpScheduler
from propertech_scheduling.services.notification_service import (
    RecordingNotificationSink, get_notification_sink,
)
from propertech_scheduling.services.scheduled_maintenance_service import ScheduledMaintenanceManager
from propertech_scheduling.services.viewing_service import ViewingScheduler

MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)
SATURDAY = date(2024, 1, 20)
NOW = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture()
def notifier():
    return RecordingNotificationSink()


# ==================== Actors ====================

@pytest.fixture()
def manager():
    return Actor(id=uuid.uuid4(), role=ActorRole.MANAGER)


@pytest.fixture()
def tenant():
    return Actor(id=uuid.uuid4(), role=ActorRole.TENANT)


@pytest.fixture()
def other_tenant():
    return Actor(id=uuid.uuid4(), role=ActorRole.TENANT)


def auth_headers(actor: Actor) -> dict:
    token = create_access_token(actor.id, actor.role.value)
    return {"Authorization": f"Bearer {token}"}


# ==================== Listings ====================

def make_property(db, owner: Actor, name="Sunset Apartments", open_for_viewing=True) -> Property:
    prop = Property(owner_id=owner.id, name=name, is_available_for_viewing=open_for_viewing)
    db.add(prop)
    db.commit()
    return prop


def add_occupant(db, prop: Property, tenant: Actor) -> None:
    db.execute(property_occupants.insert().values(property_id=prop.id, tenant_id=tenant.id))
    db.commit()


@pytest.fixture()
def listing(db, manager):
    return make_property(db, manager)


# ==================== Services ====================

@pytest.fixture()
def viewings(db, notifier):
    return ViewingScheduler(db, notifier=notifier)


@pytest.fixture()
def follow_ups(db, notifier):
    return FollowUpScheduler(db, notifier=notifier)


@pytest.fixture()
def maintenance(db, notifier):
    return ScheduledMaintenanceManager(db, notifier=notifier)


# ==================== HTTP ====================

@pytest.fixture()
def client(db, notifier):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_sink] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()
