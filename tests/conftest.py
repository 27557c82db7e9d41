"""
Pytest configuration and fixtures
"""
import os

# Point both credential levels at one shared in-memory database before any
# application module reads the configuration.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SERVICE_DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from core.database import SessionLocal, engine, get_db, get_service_db
from models.base import Base
from utils import identity_provider as identity_provider_module
from utils.identity_provider import LocalIdentityProvider
from utils.invitation_manager import InvitationManager
from utils.quiz_attempt_manager import QuizAttemptManager
from utils.quiz_manager import QuizManager
from utils.registration_flow import RegistrationFlow
from utils.user_manager import UserManager, admin_user


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Use the cheapest bcrypt cost so hashing does not dominate test time"""
    monkeypatch.setattr(identity_provider_module, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def db_session():
    """Fresh schema per test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def identity_provider(db_session):
    return LocalIdentityProvider(db_session)


@pytest.fixture
def invitation_manager(db_session):
    return InvitationManager(db_session)


@pytest.fixture
def user_manager(db_session, identity_provider):
    return UserManager(db_session, identity_provider)


@pytest.fixture
def registration_flow(invitation_manager, user_manager, identity_provider):
    return RegistrationFlow(invitation_manager, user_manager, identity_provider)


@pytest.fixture
def quiz_manager(db_session):
    return QuizManager(db_session)


@pytest.fixture
def attempt_manager(db_session):
    return QuizAttemptManager(db_session)


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test session"""
    from app import app

    def override_db():
        yield db_session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_service_db] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    from api.routes.auth import token_for

    return {"Authorization": f"Bearer {token_for(admin_user())}"}


@pytest.fixture
def registered_student(invitation_manager, registration_flow):
    """A student who completed registration with password 'secret123'"""
    invitation = invitation_manager.create_invitation(
        "Student@Example.com", "Ada Student", "S-001"
    )
    state = registration_flow.verify("student@example.com", invitation.invite_code)
    completed = registration_flow.register(state, "secret123", "secret123")
    return completed.user_id
