import logging
from typing import List, Optional

from conectajob.core.config import Settings, get_settings
from conectajob.core.security import get_password_hash
from conectajob.db.storage import STORAGE_KEYS, Storage, build_storage
from conectajob.models.schemas import (
    AdminProfile,
    Category,
    Profile,
    Project,
    category_list_adapter,
    profile_list_adapter,
    project_list_adapter,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("1", "Programming", "code"),
    ("2", "Design", "image"),
    ("3", "Writing", "file-text"),
    ("4", "Translation", "globe"),
    ("5", "Marketing", "trending-up"),
    ("6", "Video", "video"),
    ("7", "Music", "music"),
    ("8", "Business", "briefcase"),
]


class AppState:
    """
    In-memory collections mirrored into a Storage backend.

    Every mutation is followed by a write of the whole affected collection;
    queries are plain scans over the lists held here.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self.users: List[Profile] = []
        self.projects: List[Project] = []
        self.categories: List[Category] = []

    @classmethod
    def load(cls, storage: Storage) -> "AppState":
        state = cls(storage)
        state.users = profile_list_adapter.validate_python(storage.load(STORAGE_KEYS["USERS"]) or [])
        state.projects = project_list_adapter.validate_python(storage.load(STORAGE_KEYS["PROJECTS"]) or [])
        state.categories = category_list_adapter.validate_python(storage.load(STORAGE_KEYS["CATEGORIES"]) or [])
        return state

    def persist_users(self) -> None:
        self.storage.save(STORAGE_KEYS["USERS"], profile_list_adapter.dump_python(self.users, mode="json"))

    def persist_projects(self) -> None:
        self.storage.save(STORAGE_KEYS["PROJECTS"], project_list_adapter.dump_python(self.projects, mode="json"))

    def persist_categories(self) -> None:
        self.storage.save(STORAGE_KEYS["CATEGORIES"], category_list_adapter.dump_python(self.categories, mode="json"))

    def initialize_storage(self, admin_email: str, admin_password: str) -> None:
        """Seeds the admin account and default categories on first run."""
        if self.users:
            return
        self.users.append(AdminProfile(
            id="1",
            username="admin",
            email=admin_email,
            password_hash=get_password_hash(admin_password),
        ))
        self.persist_users()
        self.categories = [Category(id=cid, name=name, icon=icon) for cid, name, icon in DEFAULT_CATEGORIES]
        self.persist_categories()
        logger.info("Default data initialized")

    def find_user_by_id(self, user_id: str) -> Optional[Profile]:
        return next((u for u in self.users if u.id == user_id), None)

    def find_user_by_email(self, email: str) -> Optional[Profile]:
        return next((u for u in self.users if u.email == email), None)

    def find_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def find_category(self, name: str) -> Optional[Category]:
        return next((c for c in self.categories if c.name == name), None)


_app_state: Optional[AppState] = None


def create_app_state(settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> AppState:
    settings = settings or get_settings()
    state = AppState.load(storage if storage is not None else build_storage(settings))
    state.initialize_storage(settings.admin_email, settings.admin_password)
    return state


def get_app_state() -> AppState:
    """Process-wide application state, created lazily from the settings."""
    global _app_state
    if _app_state is None:
        _app_state = create_app_state()
    return _app_state
