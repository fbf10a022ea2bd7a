import logging
from datetime import datetime, timedelta
from typing import Optional

from auth import UserDirectory
from config import Settings
from database import Database
from models import ErrorCode, Event, EventStatistics, RegistrationResult
from repositories import EventRepository, StorageKeys
from seed_data import DEFAULT_EVENTS
from utils import loose_id, parse_date

logger = logging.getLogger(__name__)


class EventCatalog:
    def __init__(self, db: Database, seed: Optional[list[dict]] = None, popular_sort_in_place: bool = True,
                 popular_limit: int = 10, upcoming_window_days: int = 7):
        """Load events from storage, or from the seed list when none are stored."""
        self.repo = EventRepository(db, seed)
        self.events: list[Event] = self.repo.load()
        self.popular_sort_in_place = popular_sort_in_place
        self.popular_limit = popular_limit
        self.upcoming_window = timedelta(days=upcoming_window_days)

    def save(self):
        self.repo.save(self.events)

    def list_events(self) -> list[Event]:
        return list(self.events)

    def create_event(self, event_data: dict) -> Event:
        """Append a new event with id = current max id + 1 and one attendee (the creator)."""
        new_id = max((e.id or 0 for e in self.events), default=0) + 1
        fields = {k: v for k, v in event_data.items() if k != "id"}
        event = Event(id=new_id).merge(fields)
        event.attendees = 1
        self.events.append(event)
        self.save()
        logger.info(f"Event {new_id} created ({event.display_details()})")
        return event

    def update_event(self, event_id, updated_data: dict) -> Optional[Event]:
        event = next((e for e in self.events if e.id == event_id), None)
        if event is None:
            logger.debug(f"update_event: no event {event_id}")
            return None
        event.merge(updated_data)
        self.save()
        logger.info(f"Event {event_id} updated")
        return event

    def delete_event(self, event_id) -> bool:
        index = next((i for i, e in enumerate(self.events) if e.id == event_id), None)
        if index is None:
            return False
        del self.events[index]
        self.save()
        logger.info(f"Event {event_id} deleted")
        return True

    def get_event_by_id(self, event_id) -> Optional[Event]:
        """Lookup accepting either 3 or "3"."""
        key = loose_id(event_id)
        if key is None:
            return None
        return next((e for e in self.events if loose_id(e.id) == key), None)

    def filter_by_category(self, category: str) -> list[Event]:
        return [e for e in self.events if e.category == category]

    def filter_by_district(self, district: str) -> list[Event]:
        return [e for e in self.events if e.district == district]

    def categories(self) -> list[str]:
        return sorted({e.category for e in self.events if e.category})

    def districts(self) -> list[str]:
        return sorted({e.district for e in self.events if e.district})

    def search_events(self, query: str) -> list[Event]:
        """Case-insensitive substring match on title, description and venue."""
        q = query.lower()
        return [
            e for e in self.events
            if q in e.title.lower() or q in e.description.lower() or q in e.venue.lower()
        ]

    def get_upcoming_events(self, now: Optional[datetime] = None) -> list[Event]:
        """Events dated within [now, now + window], soonest first. Unparsable dates are skipped."""
        now = now or datetime.now()
        end = now + self.upcoming_window
        dated = [(parse_date(e.date), e) for e in self.events]
        upcoming = [(d, e) for d, e in dated if d is not None and now <= d <= end]
        upcoming.sort(key=lambda pair: pair[0])
        return [e for _, e in upcoming]

    def get_popular_events(self) -> list[Event]:
        """Top events by attendees.

        With popular_sort_in_place the live list is reordered, and the new
        order is persisted by the next save().
        """
        key = lambda e: e.attendees or 0
        if self.popular_sort_in_place:
            self.events.sort(key=key, reverse=True)
            ranked = self.events
        else:
            ranked = sorted(self.events, key=key, reverse=True)
        return ranked[:self.popular_limit]

    def register_for_event(self, event_id, user_id) -> bool:
        """Record user_id on the event only. The user side is left untouched."""
        event = self.get_event_by_id(event_id)
        if event is None:
            return False
        if event.registered_users is None:
            event.registered_users = []
        if user_id in event.registered_users:
            return False
        event.registered_users.append(user_id)
        event.attendees = (event.attendees or 0) + 1
        self.save()
        logger.info(f"User {user_id} registered for event {event.id}")
        return True

    def get_user_registered_events(self, user_id) -> list[Event]:
        return [e for e in self.events if e.registered_users and user_id in e.registered_users]

    def get_event_statistics(self) -> EventStatistics:
        return EventStatistics(
            total_events=len(self.events),
            total_categories=len({e.category for e in self.events}),
            total_districts=len({e.district for e in self.events}),
            total_capacity=sum(e.capacity or 0 for e in self.events),
            total_attendees=sum(e.attendees or 0 for e in self.events),
        )


class EventManager:
    def __init__(self, db: Database, settings: Optional[Settings] = None, seed: Optional[list[dict]] = None):
        """Wire the user directory and event catalog onto one store. Build one per process."""
        self.db = db
        self.settings = settings or Settings()
        self.users = UserDirectory(db)
        self.events = EventCatalog(
            db,
            seed=DEFAULT_EVENTS if seed is None else seed,
            popular_sort_in_place=self.settings.popular_sort_in_place,
            popular_limit=self.settings.popular_limit,
            upcoming_window_days=self.settings.upcoming_window_days,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "EventManager":
        return cls(Database(settings.db_name), settings)

    def register_user_for_event(self, user_id, event_id) -> bool:
        """Register on both the user and the event, or on neither.

        Returns False without touching storage when either side is unknown or
        the pair is already registered on both sides. A pair registered on
        one side only is completed.
        """
        user = self.users.get_user_by_id(user_id)
        event = self.events.get_event_by_id(event_id)
        if user is None or event is None:
            return False
        user_changed = self.users.register_for_event(user.id, event.id)
        event_changed = self.events.register_for_event(event.id, user.id)
        if user_changed:
            self.users.refresh_session(user.id)
        return user_changed or event_changed

    def view_event(self, event_id):
        self.db.set_item(StorageKeys.EVENT_ID, event_id)

    def current_event(self) -> Optional[Event]:
        raw = self.db.get_item(StorageKeys.EVENT_ID)
        return self.events.get_event_by_id(raw) if raw is not None else None

    def browse_district(self, email: str, role: str, district: str):
        result = self.users.quick_login(email, role)
        self.db.set_item(StorageKeys.SELECTED_DISTRICT, district)
        return result

    def selected_district(self) -> Optional[str]:
        return self.db.get_item(StorageKeys.SELECTED_DISTRICT)

    def dashboard_events(self) -> list[Event]:
        district = self.selected_district()
        return self.events.filter_by_district(district) if district else self.events.list_events()

    def register_current_user(self) -> RegistrationResult:
        """Register the session user for the most recently viewed event."""
        current = self.users.get_current_user()
        if current is None:
            return RegistrationResult(False, "Please login first", error=ErrorCode.NOT_AUTHENTICATED)
        event = self.current_event()
        if event is None:
            return RegistrationResult(False, "Event not found", error=ErrorCode.NOT_FOUND)
        if self.users.get_user_by_id(current.id) is None:
            return RegistrationResult(False, "User not found", error=ErrorCode.NOT_FOUND)
        if not self.register_user_for_event(current.id, event.id):
            return RegistrationResult(False, f"Already registered for {event.title}", event=event,
                                      error=ErrorCode.ALREADY_REGISTERED)
        return RegistrationResult(True, f"Successfully registered for {event.title}!", event=event)

    def close(self):
        """Close the underlying store."""
        self.db.close()
