import os

os.environ["TESTING"] = "True"
os.environ["DATABASE_URL"] = "sqlite://"

import uuid

import pytest
from fastapi import BackgroundTasks
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.deps import get_notification_sink
from app.core.security import create_access_token, get_password_hash
from app.database import get_db
from app.db.base import Base
from app.main import app
from app.models.property import Property, PropertyStatus
from app.models.user import User, UserType
from app.services.allocation_engine import AllocationEngine
from app.services.allocation_rules import AllocationPolicy
from app.services.notification_service import (
    BackgroundNotificationSink, DatabaseNotificationSink, InMemoryNotificationSink,
)
from app.services.persistence import SqlAlchemyGateway
from app.services.user_service import SqlAlchemyUserLookup

TEST_PASSWORD = "Password123"
_hashed_password = None


def hashed_test_password() -> str:
    global _hashed_password
    if _hashed_password is None:
        _hashed_password = get_password_hash(TEST_PASSWORD)
    return _hashed_password


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def notifier():
    return InMemoryNotificationSink()


@pytest.fixture()
def make_engine(db_session, notifier):
    def factory(policy=None, gateway=None, sink=None):
        return AllocationEngine(
            gateway=gateway or SqlAlchemyGateway(db_session),
            users=SqlAlchemyUserLookup(db_session),
            notifier=sink or notifier,
            policy=policy or AllocationPolicy(),
        )
    return factory


@pytest.fixture()
def allocation_engine(make_engine):
    return make_engine()


@pytest.fixture()
def make_user(db_session):
    def factory(user_type=UserType.STUDENT, name=None, gender=None, religion=None, email=None):
        suffix = uuid.uuid4().hex[:8]
        user = User(
            name=name or f"{user_type.value.title()} {suffix}",
            email=email or f"{user_type.value.lower()}-{suffix}@example.com",
            hashed_password=hashed_test_password(),
            user_type=user_type,
            gender=gender,
            religion=religion,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return factory


@pytest.fixture()
def landlord(make_user):
    return make_user(UserType.LANDLORD, name="Lana Landlord")


@pytest.fixture()
def make_student(make_user):
    def factory(**kwargs):
        return make_user(UserType.STUDENT, **kwargs)
    return factory


@pytest.fixture()
def make_property(db_session):
    def factory(owner, bedrooms=4, room_sharing=False, tenants_per_room=1, price=500.0,
                status=PropertyStatus.AVAILABLE, location="12 College Road", **kwargs):
        prop = Property(
            owner_id=owner.id,
            location=location,
            price=price,
            bedrooms=bedrooms,
            room_sharing=room_sharing,
            tenants_per_room=tenants_per_room if room_sharing else 1,
            status=status,
            **kwargs,
        )
        db_session.add(prop)
        db_session.commit()
        db_session.refresh(prop)
        return prop
    return factory


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def override_get_notification_sink(background_tasks: BackgroundTasks):
        return BackgroundNotificationSink(background_tasks, DatabaseNotificationSink(session_factory))

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_sink] = override_get_notification_sink
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def build(user) -> dict:
        token = create_access_token({"sub": str(user.id), "user_type": user.user_type.value})
        return {"Authorization": f"Bearer {token}"}
    return build
