import copy
import logging
from typing import Optional

from database import Database
from models import Event, User

logger = logging.getLogger(__name__)


class StorageKeys:
    USERS = "users"
    CURRENT_USER = "currentUser"
    USER_ROLE = "userRole"
    USER_EMAIL = "userEmail"
    USER_ID = "userId"
    EVENTS = "events"
    EVENT_ID = "eventId"
    SELECTED_DISTRICT = "selectedDistrict"

    SESSION = (CURRENT_USER, USER_ROLE, USER_EMAIL, USER_ID)


class UserRepository:
    """Users list and the session keys. The whole list is rewritten on save()."""

    def __init__(self, db: Database):
        self.db = db

    def load(self) -> list[User]:
        return [User.from_dict(u) for u in self.db.get_json(StorageKeys.USERS, [])]

    def save(self, users: list[User]):
        self.db.set_json(StorageKeys.USERS, [u.to_dict() for u in users])
        logger.debug(f"Saved {len(users)} users")

    def load_session(self) -> Optional[User]:
        data = self.db.get_json(StorageKeys.CURRENT_USER)
        return User.from_dict(data) if data else None

    def save_session(self, user: User):
        self.db.set_json(StorageKeys.CURRENT_USER, user.to_dict())
        self.db.set_item(StorageKeys.USER_ROLE, user.role)
        self.db.set_item(StorageKeys.USER_EMAIL, user.email)
        self.db.set_item(StorageKeys.USER_ID, user.id)

    def clear_session(self):
        for key in StorageKeys.SESSION:
            self.db.remove_item(key)


class EventRepository:
    """Events list, falling back to a seed dataset until the first save()."""

    def __init__(self, db: Database, seed: Optional[list[dict]] = None):
        self.db = db
        self.seed = seed or []

    def load(self) -> list[Event]:
        if self.db.has_item(StorageKeys.EVENTS):
            data = self.db.get_json(StorageKeys.EVENTS, [])
        else:
            logger.info(f"No stored events, using {len(self.seed)} seed events")
            data = copy.deepcopy(self.seed)
        return [Event.from_dict(e) for e in data]

    def save(self, events: list[Event]):
        self.db.set_json(StorageKeys.EVENTS, [e.to_dict() for e in events])
        logger.debug(f"Saved {len(events)} events")
