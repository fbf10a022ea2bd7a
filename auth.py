import logging
from datetime import datetime, UTC
from typing import Optional

from database import Database
from models import AuthResult, ErrorCode, User
from repositories import UserRepository
from utils import display_name_from_email, now_millis

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class UserDirectory:
    """Registered users plus the single current session.

    Passwords are kept and compared as plain text. This is a local demo
    store, not an authentication system.
    """

    def __init__(self, db: Database):
        self.repo = UserRepository(db)
        self.users: list[User] = self.repo.load()
        self.current_user: Optional[User] = self.repo.load_session()
        self._last_id = max((u.id for u in self.users), default=0)

    def save(self):
        self.repo.save(self.users)

    def _next_id(self) -> int:
        # Millisecond timestamps, bumped so two users created in the same ms differ.
        self._last_id = max(now_millis(), self._last_id + 1)
        return self._last_id

    def _new_user(self, email: str, name: str, role: str, password: Optional[str] = None) -> User:
        return User(
            id=self._next_id(),
            email=email,
            password=password,
            name=name,
            role=role,
            created_at=_timestamp(),
        )

    def _start_session(self, user: User):
        self.current_user = user
        self.repo.save_session(user)

    def get_user_by_id(self, user_id) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)

    def get_user_by_email(self, email: str, role: Optional[str] = None) -> Optional[User]:
        return next(
            (u for u in self.users if u.email == email and (role is None or u.role == role)),
            None,
        )

    def register(self, email: str, password: str, name: str, role: str) -> AuthResult:
        """Create an account. Emails are unique across roles. Does not log in."""
        if self.get_user_by_email(email):
            return AuthResult(False, "Email already registered", error=ErrorCode.DUPLICATE_EMAIL)
        user = self._new_user(email, name, role, password)
        self.users.append(user)
        self.save()
        logger.info(f"User {email} registered with role {role}")
        return AuthResult(True, "Registration successful", user=user)

    def login(self, email: str, password: Optional[str], role: str) -> AuthResult:
        user = self.get_user_by_email(email, role)
        if not user:
            return AuthResult(False, "Invalid credentials", error=ErrorCode.NOT_FOUND)
        if user.password != password:
            return AuthResult(False, "Invalid password", error=ErrorCode.INVALID_PASSWORD)
        self._start_session(user)
        logger.info(f"User {email} logged in as {role}")
        return AuthResult(True, "Login successful", user=user)

    def quick_login(self, email: str, role: str) -> AuthResult:
        """Log in by email and role, creating a passwordless account on first use."""
        user = self.get_user_by_email(email, role)
        if not user:
            user = self._new_user(email, display_name_from_email(email), role)
            self.users.append(user)
            self.save()
            logger.info(f"Quick login created user {email} ({role})")
        self._start_session(user)
        return AuthResult(True, "Login successful", user=user)

    def logout(self):
        self.current_user = None
        self.repo.clear_session()

    def get_current_user(self) -> Optional[User]:
        return self.current_user or self.repo.load_session()

    def is_authenticated(self) -> bool:
        return self.get_current_user() is not None

    def update_profile(self, user_id, updates: dict) -> bool:
        user = self.get_user_by_id(user_id)
        if not user:
            logger.debug(f"update_profile: no user {user_id}")
            return False
        user.merge(updates)
        self.save()
        self.refresh_session(user_id)
        return True

    def refresh_session(self, user_id):
        """Rewrite the session copies if user_id is the logged-in user."""
        current = self.get_current_user()
        user = self.get_user_by_id(user_id)
        if current and user and current.id == user_id:
            self._start_session(user)

    def register_for_event(self, user_id, event_id) -> bool:
        """Record event_id on the user only. The event side is left untouched."""
        user = self.get_user_by_id(user_id)
        if not user or event_id in user.registered_events:
            return False
        user.registered_events.append(event_id)
        self.save()
        return True

    def get_user_registered_events(self, user_id) -> list[int]:
        user = self.get_user_by_id(user_id)
        return user.registered_events if user else []
