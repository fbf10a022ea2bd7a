from datetime import datetime

import pytest
from config import Settings
from database import Database
from manager import EventCatalog, EventManager
from models import ErrorCode
from repositories import StorageKeys


def new_event(**overrides):
    data = {"title": "Hack Night", "description": "24 hour hackathon", "venue": "CS Block",
            "category": "Technical", "district": "Kottayam", "date": "2024-07-01",
            "time": "20:00", "capacity": 80}
    data.update(overrides)
    return data


@pytest.fixture
def catalog(seeded_manager):
    return seeded_manager.events


def test_first_event_on_empty_catalog_gets_id_1(manager):
    event = manager.events.create_event(new_event())
    assert event.id == 1
    assert event.attendees == 1


def test_create_event_uses_max_id_plus_one(db):
    db.set_json(StorageKeys.EVENTS, [{"id": 3, "title": "Old"}])
    catalog = EventCatalog(db)
    assert catalog.create_event(new_event()).id == 4


def test_created_ids_strictly_increase(db):
    db.set_json(StorageKeys.EVENTS, [{"id": 7}, {"id": 2}])
    catalog = EventCatalog(db)
    ids = [catalog.create_event(new_event(title=f"E{i}")).id for i in range(4)]
    assert ids == [8, 9, 10, 11]


def test_create_event_ignores_supplied_id_and_attendees(manager, db):
    event = manager.events.create_event(new_event(id=99, attendees=50, poster="hack.png"))
    assert event.id == 1
    assert event.attendees == 1
    stored = db.get_json(StorageKeys.EVENTS)
    assert stored == [event.to_dict()]
    assert stored[0]["poster"] == "hack.png"
    assert "registeredUsers" not in stored[0]


def test_seed_used_until_first_save(seeded_manager, db):
    assert [e.id for e in seeded_manager.events.list_events()] == [1, 2, 3]
    assert not db.has_item(StorageKeys.EVENTS)
    seeded_manager.events.create_event(new_event())
    assert [e["id"] for e in db.get_json(StorageKeys.EVENTS)] == [1, 2, 3, 4]


def test_stored_events_take_precedence_over_seed(db, sample_events):
    db.set_json(StorageKeys.EVENTS, [])
    catalog = EventCatalog(db, seed=sample_events)
    assert catalog.list_events() == []
    assert catalog.create_event(new_event()).id == 1


def test_update_event(catalog, db):
    updated = catalog.update_event(2, {"venue": "Auditorium", "capacity": 600})
    assert updated.venue == "Auditorium"
    assert updated.title == "Music Night"
    assert db.get_json(StorageKeys.EVENTS)[1]["capacity"] == 600


def test_update_event_not_found(catalog):
    assert catalog.update_event(42, {"title": "x"}) is None
    # update and delete match ids strictly
    assert catalog.update_event("2", {"title": "x"}) is None


def test_delete_event(catalog, db):
    assert catalog.delete_event(1)
    assert [e.id for e in catalog.list_events()] == [2, 3]
    assert [e["id"] for e in db.get_json(StorageKeys.EVENTS)] == [2, 3]
    assert catalog.delete_event(1) is False


def test_get_event_by_id_is_loose(catalog):
    assert catalog.get_event_by_id(2).title == "Music Night"
    assert catalog.get_event_by_id("2").title == "Music Night"
    assert catalog.get_event_by_id("abc") is None
    assert catalog.get_event_by_id(99) is None


def test_filters_preserve_order(catalog):
    assert [e.id for e in catalog.filter_by_district("Thrissur")] == [1, 3]
    assert [e.id for e in catalog.filter_by_category("Cultural")] == [2]
    assert catalog.filter_by_category("technical") == []
    assert catalog.districts() == ["Ernakulam", "Thrissur"]
    assert catalog.categories() == ["Cultural", "Sports", "Technical"]


def test_search_is_case_insensitive(catalog):
    results = catalog.search_events("Tech")
    assert [e.title for e in results] == ["TechFest 2024"]
    assert [e.id for e in catalog.search_events("STADIUM")] == [3]
    assert [e.id for e in catalog.search_events("live bands")] == [2]


def test_upcoming_events_window(db):
    db.set_json(StorageKeys.EVENTS, [
        {"id": 1, "date": "2024-05-08"},
        {"id": 2, "date": "2024-05-03"},
        {"id": 3, "date": "2024-05-01"},
        {"id": 4, "date": "2024-05-09"},
        {"id": 5, "date": "not a date"},
        {"id": 6, "date": "2024-05-01T18:00:00"},
    ])
    catalog = EventCatalog(db)
    upcoming = catalog.get_upcoming_events(now=datetime(2024, 5, 1, 12, 0))
    assert [e.id for e in upcoming] == [6, 2, 1]


def test_popular_events_sort_live_catalog(db):
    db.set_json(StorageKeys.EVENTS, [{"id": 1, "attendees": 5}, {"id": 2, "attendees": 9}])
    catalog = EventCatalog(db)
    assert [e.id for e in catalog.get_popular_events()] == [2, 1]
    # legacy behaviour: the live order changes, and the next save persists it
    assert [e.id for e in catalog.list_events()] == [2, 1]
    assert [e["id"] for e in db.get_json(StorageKeys.EVENTS)] == [1, 2]
    catalog.create_event(new_event())
    assert [e["id"] for e in db.get_json(StorageKeys.EVENTS)] == [2, 1, 3]


def test_popular_events_on_copy(db):
    db.set_json(StorageKeys.EVENTS, [{"id": 1, "attendees": 5}, {"id": 2, "attendees": 9}])
    catalog = EventCatalog(db, popular_sort_in_place=False)
    assert [e.id for e in catalog.get_popular_events()] == [2, 1]
    assert [e.id for e in catalog.list_events()] == [1, 2]


def test_popular_events_limit_and_stable_ties(db):
    db.set_json(StorageKeys.EVENTS, [{"id": i, "attendees": 10 if i in (4, 7) else i % 3} for i in range(1, 13)])
    catalog = EventCatalog(db)
    popular = catalog.get_popular_events()
    assert len(popular) == 10
    assert [e.id for e in popular[:2]] == [4, 7]


def test_popular_flag_from_settings(db):
    db.set_json(StorageKeys.EVENTS, [{"id": 1, "attendees": 5}, {"id": 2, "attendees": 9}])
    manager = EventManager(db, Settings(popular_sort_in_place=False), seed=[])
    manager.events.get_popular_events()
    assert [e.id for e in manager.events.list_events()] == [1, 2]


def test_catalog_register_for_event_is_idempotent(catalog, db):
    assert catalog.get_event_by_id(1).registered_users is None
    assert catalog.register_for_event(1, 555)
    assert not catalog.register_for_event(1, 555)
    event = catalog.get_event_by_id(1)
    assert event.attendees == 41
    assert event.registered_users == [555]
    assert db.get_json(StorageKeys.EVENTS)[0]["registeredUsers"] == [555]


def test_catalog_register_for_unknown_event(catalog):
    assert catalog.register_for_event(99, 555) is False


def test_get_user_registered_events(catalog):
    catalog.register_for_event(1, 555)
    catalog.register_for_event(3, 555)
    catalog.register_for_event(2, 777)
    assert [e.id for e in catalog.get_user_registered_events(555)] == [1, 3]
    assert catalog.get_user_registered_events(1) == []


def test_event_statistics(catalog):
    stats = catalog.get_event_statistics()
    assert stats.total_events == 3
    assert stats.total_categories == 3
    assert stats.total_districts == 2
    assert stats.total_capacity == 1800
    assert stats.total_attendees == 235
    assert stats.to_dict()["totalAttendees"] == 235


def test_split_registration_leaves_sides_inconsistent(seeded_manager):
    # The two per-component operations are independent; calling one leaves the other side stale.
    user = seeded_manager.users.register("anu@college.edu", "pw", "Anu", "student").user
    seeded_manager.users.register_for_event(user.id, 1)
    assert seeded_manager.events.get_user_registered_events(user.id) == []
    seeded_manager.events.register_for_event(2, user.id)
    assert seeded_manager.users.get_user_registered_events(user.id) == [1]


def test_register_user_for_event_updates_both_sides(seeded_manager, db):
    user = seeded_manager.users.register("anu@college.edu", "pw", "Anu", "student").user
    assert seeded_manager.register_user_for_event(user.id, 2)
    assert seeded_manager.users.get_user_registered_events(user.id) == [2]
    assert [e.id for e in seeded_manager.events.get_user_registered_events(user.id)] == [2]
    assert seeded_manager.events.get_event_by_id(2).attendees == 121
    assert not seeded_manager.register_user_for_event(user.id, 2)
    assert seeded_manager.events.get_event_by_id(2).attendees == 121


def test_register_user_for_event_unknown_side_changes_nothing(seeded_manager, db):
    user = seeded_manager.users.register("anu@college.edu", "pw", "Anu", "student").user
    assert not seeded_manager.register_user_for_event(user.id, 99)
    assert not seeded_manager.register_user_for_event(12345, 1)
    assert seeded_manager.users.get_user_registered_events(user.id) == []
    assert seeded_manager.events.get_event_by_id(1).registered_users is None
    assert not db.has_item(StorageKeys.EVENTS)


def test_register_user_for_event_completes_half_registration(seeded_manager):
    user = seeded_manager.users.register("anu@college.edu", "pw", "Anu", "student").user
    seeded_manager.users.register_for_event(user.id, 3)
    assert seeded_manager.register_user_for_event(user.id, 3)
    assert seeded_manager.events.get_event_by_id(3).registered_users == [user.id]
    assert seeded_manager.users.get_user_registered_events(user.id) == [3]


def test_register_user_for_event_refreshes_session(seeded_manager, db):
    user = seeded_manager.users.quick_login("anu@college.edu", "student").user
    seeded_manager.register_user_for_event(user.id, 1)
    assert db.get_json(StorageKeys.CURRENT_USER)["registeredEvents"] == [1]


def test_view_event_hand_off(seeded_manager, db):
    seeded_manager.view_event(3)
    assert db.get_item(StorageKeys.EVENT_ID) == "3"
    assert seeded_manager.current_event().title == "Football Finals"


def test_browse_district(seeded_manager, db):
    result = seeded_manager.browse_district("anu@college.edu", "student", "Thrissur")
    assert result.success
    assert db.get_item(StorageKeys.SELECTED_DISTRICT) == "Thrissur"
    assert [e.id for e in seeded_manager.dashboard_events()] == [1, 3]


def test_dashboard_without_district(seeded_manager):
    assert seeded_manager.selected_district() is None
    assert len(seeded_manager.dashboard_events()) == 3


def test_register_current_user_requires_login(seeded_manager):
    seeded_manager.view_event(1)
    result = seeded_manager.register_current_user()
    assert not result.success
    assert result.error == ErrorCode.NOT_AUTHENTICATED


def test_register_current_user_requires_viewed_event(seeded_manager):
    seeded_manager.users.quick_login("anu@college.edu", "student")
    result = seeded_manager.register_current_user()
    assert result.error == ErrorCode.NOT_FOUND


def test_register_current_user(seeded_manager):
    user = seeded_manager.users.quick_login("anu@college.edu", "student").user
    seeded_manager.view_event(1)
    result = seeded_manager.register_current_user()
    assert result.success
    assert result.message == "Successfully registered for TechFest 2024!"
    assert seeded_manager.events.get_event_by_id(1).registered_users == [user.id]
    again = seeded_manager.register_current_user()
    assert again.error == ErrorCode.ALREADY_REGISTERED


def test_two_contexts_last_writer_wins(tmp_path):
    path = str(tmp_path / "events.db")
    tab_a = EventManager(Database(path), seed=[])
    tab_b = EventManager(Database(path), seed=[])
    tab_a.events.create_event(new_event(title="From A"))
    # tab_b still holds its stale, empty list
    tab_b.events.create_event(new_event(title="From B"))
    reader = EventManager(Database(path), seed=[])
    assert [e.title for e in reader.events.list_events()] == ["From B"]
    for m in (tab_a, tab_b, reader):
        m.close()
