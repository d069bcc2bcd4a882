import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient

from conectajob.core.config import Settings
from conectajob.core.security import create_access_token
from conectajob.db import state as state_module
from conectajob.db.state import create_app_state
from conectajob.db.storage import MemoryStorage
from conectajob.main import app
from conectajob.models.schemas import ProjectCreate, UserRole
from conectajob.services.marketplace import MarketplaceService
from conectajob.services.session import AuthService, Session

ADMIN_EMAIL = "admin@conectajob.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def app_state(storage, monkeypatch):
    """Seeded state on an in-memory store, installed as the process-wide state."""
    state = create_app_state(
        Settings(storage_backend="memory", admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD),
        storage=storage,
    )
    monkeypatch.setattr(state_module, "_app_state", state)
    return state


@pytest.fixture
def client(app_state):
    return TestClient(app)


def register_user(app_state, username, email, role, password="password123"):
    """Registers through the service and returns the stored profile."""
    return AuthService(app_state, Session()).register(username, email, password, role)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(data={'sub': user.id})}"}


def service_for(app_state, user=None):
    return MarketplaceService(app_state, Session(user))


def future_deadline(days=30):
    return date.today() + timedelta(days=days)


def project_payload(**overrides):
    data = {
        "title": "Logo design",
        "description": "A clean vector logo for a small bakery business.",
        "category": "Design",
        "budget": 500,
        "deadline": future_deadline(),
    }
    data.update(overrides)
    return ProjectCreate(**data)


@pytest.fixture
def ana(app_state):
    return register_user(app_state, "Ana", "ana@x.com", UserRole.CLIENT, password="pass1234")


@pytest.fixture
def bob(app_state):
    return register_user(app_state, "Bob", "bob@x.com", UserRole.FREELANCER)


@pytest.fixture
def carla(app_state):
    return register_user(app_state, "Carla", "carla@x.com", UserRole.FREELANCER)


@pytest.fixture
def admin(app_state):
    return app_state.find_user_by_email(ADMIN_EMAIL)


@pytest.fixture
def ana_project(app_state, ana):
    return service_for(app_state, ana).create_project(project_payload())
