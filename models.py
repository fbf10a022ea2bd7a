from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Literal, Optional

Role = Literal["student", "organizer"]


class ErrorCode(str, Enum):
    DUPLICATE_EMAIL = "duplicate_email"
    NOT_FOUND = "not_found"
    INVALID_PASSWORD = "invalid_password"
    ALREADY_REGISTERED = "already_registered"
    NOT_AUTHENTICATED = "not_authenticated"


class Record:
    """Shared storage mapping for User and Event.

    Attributes are snake_case; the stored JSON keeps the camelCase names the
    data has always been saved under. Keys the dataclass does not declare are
    kept in ``extra`` and written back flat.
    """

    ALIASES: dict[str, str] = {}
    OMIT_IF_NONE: tuple[str, ...] = ()

    @classmethod
    def _attr_name(cls, key: str) -> str:
        return cls.ALIASES.get(key, key)

    @classmethod
    def _storage_name(cls, attr: str) -> str:
        for key, name in cls.ALIASES.items():
            if name == attr:
                return key
        return attr

    @classmethod
    def _declared(cls) -> set[str]:
        return {f.name for f in fields(cls) if f.name != "extra"}

    @classmethod
    def from_dict(cls, data: dict):
        declared = cls._declared()
        known, extra = {}, {}
        for key, value in data.items():
            attr = cls._attr_name(key)
            if attr in declared:
                known[attr] = value
            else:
                extra[key] = value
        return cls(**known, extra=extra)

    def merge(self, updates: dict):
        """Shallow merge: every supplied key overwrites the current value."""
        declared = self._declared()
        for key, value in updates.items():
            attr = self._attr_name(key)
            if attr in declared:
                setattr(self, attr, value)
            else:
                self.extra[key] = value
        return self

    def to_dict(self) -> dict:
        data = {}
        for name in (f.name for f in fields(self) if f.name != "extra"):
            value = getattr(self, name)
            if value is None and name in self.OMIT_IF_NONE:
                continue
            data[self._storage_name(name)] = value
        data.update(self.extra)
        return data


@dataclass
class User(Record):
    id: int
    email: str
    name: str = ""
    role: Role = "student"
    password: Optional[str] = None  # plain text, quick-login users have none
    registered_events: list[int] = field(default_factory=list)
    created_events: list[int] = field(default_factory=list)
    created_at: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    ALIASES = {
        "registeredEvents": "registered_events",
        "createdEvents": "created_events",
        "createdAt": "created_at",
    }
    OMIT_IF_NONE = ("password",)

    def to_public(self) -> dict:
        data = self.to_dict()
        data.pop("password", None)
        return data


@dataclass
class Event(Record):
    id: int
    title: str = ""
    description: str = ""
    venue: str = ""
    category: str = ""
    district: str = ""
    date: str = ""
    time: str = ""
    capacity: int = 0
    attendees: int = 0
    registered_users: Optional[list[int]] = None  # created on first registration
    extra: dict[str, Any] = field(default_factory=dict)

    ALIASES = {"registeredUsers": "registered_users"}
    OMIT_IF_NONE = ("registered_users",)

    def display_details(self) -> str:
        """Return a string representation of the event details."""
        return f"Event: {self.title}, Date: {self.date} {self.time}, Venue: {self.venue}, Capacity: {self.capacity}"


@dataclass
class EventStatistics:
    total_events: int
    total_categories: int
    total_districts: int
    total_capacity: int
    total_attendees: int

    def to_dict(self) -> dict:
        return {
            "totalEvents": self.total_events,
            "totalCategories": self.total_categories,
            "totalDistricts": self.total_districts,
            "totalCapacity": self.total_capacity,
            "totalAttendees": self.total_attendees,
        }


@dataclass
class AuthResult:
    success: bool
    message: str = ""
    user: Optional[User] = None
    error: Optional[ErrorCode] = None


@dataclass
class RegistrationResult:
    success: bool
    message: str = ""
    event: Optional[Event] = None
    error: Optional[ErrorCode] = None
