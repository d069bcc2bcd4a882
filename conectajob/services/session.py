import logging
from typing import Optional
from uuid import uuid4

from conectajob.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from conectajob.core.security import get_password_hash, verify_password
from conectajob.db.state import AppState
from conectajob.db.storage import STORAGE_KEYS, Storage
from conectajob.models.schemas import (
    ClientProfile,
    FreelancerProfile,
    Profile,
    UserRole,
    profile_adapter,
)
from conectajob.services import validation

logger = logging.getLogger(__name__)


class Session:
    """
    Tracks the currently authenticated user.

    A session created with a storage backend mirrors its user under the
    `current_user` key, so it survives restarts. Sessions built per HTTP
    request pass no storage and live only as long as the request.
    """

    def __init__(self, user: Optional[Profile] = None, storage: Optional[Storage] = None):
        self.current_user = user
        self._storage = storage

    @classmethod
    def restore(cls, state: AppState) -> "Session":
        """Re-establishes the persisted current user, if it still exists."""
        session = cls(storage=state.storage)
        raw = state.storage.load(STORAGE_KEYS["CURRENT_USER"])
        if raw is None:
            return session
        stored = profile_adapter.validate_python(raw)
        user = state.find_user_by_id(stored.id)
        if user is None:
            logger.warning("Persisted session user %s no longer exists; clearing it", stored.id)
            session.clear()
        else:
            session.current_user = user
        return session

    def establish(self, user: Profile) -> None:
        self.current_user = user
        if self._storage is not None:
            self._storage.save(STORAGE_KEYS["CURRENT_USER"], profile_adapter.dump_python(user, mode="json"))

    def clear(self) -> None:
        self.current_user = None
        if self._storage is not None:
            self._storage.delete(STORAGE_KEYS["CURRENT_USER"])

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def role(self) -> Optional[UserRole]:
        return UserRole(self.current_user.role) if self.current_user else None

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT

    @property
    def is_freelancer(self) -> bool:
        return self.role == UserRole.FREELANCER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def require_user(self) -> Profile:
        if self.current_user is None:
            raise AuthError("You must be logged in")
        return self.current_user


class AuthService:
    """register / login / logout against the users collection."""

    def __init__(self, state: AppState, session: Session):
        self.state = state
        self.session = session

    def register(self, username: str, email: str, password: str, role: UserRole) -> Profile:
        validation.validate_username(username)
        validation.validate_email(email)
        validation.validate_password(password)
        try:
            role = UserRole(role)
        except ValueError:
            raise ValidationError(f"Unknown role '{role}'")
        if role not in (UserRole.CLIENT, UserRole.FREELANCER):
            raise ValidationError("Only client and freelancer accounts can be registered")

        if self.state.find_user_by_email(email):
            logger.warning("Registration rejected: %s is already registered", email)
            raise ConflictError("User with this email already exists")

        user_id = str(uuid4())
        hashed_password = get_password_hash(password)
        if role == UserRole.FREELANCER:
            new_user = FreelancerProfile(id=user_id, username=username, email=email, password_hash=hashed_password)
        else:
            new_user = ClientProfile(id=user_id, username=username, email=email, password_hash=hashed_password)

        self.state.users.append(new_user)
        self.state.persist_users()
        self.session.establish(new_user)
        logger.info("Registered %s %s (%s)", role.value, username, user_id)
        return new_user

    def login(self, email: str, password: str) -> Profile:
        if not email or not password:
            raise ValidationError("Please provide both email and password")

        user = self.state.find_user_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        if not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", email)
            raise AuthError("Incorrect password")

        self.session.establish(user)
        logger.info("User %s logged in", user.username)
        return user

    def logout(self) -> None:
        self.session.clear()
