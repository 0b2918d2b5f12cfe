import datetime as dt

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError

from dragevents.data.repository import Repository
from dragevents.data.timestamps import ZERO_TIMESTAMP

UTC = dt.timezone.utc


def _class_and_rule_counts(repo, event_id):
    classes = [c for c in repo.list_event_classes() if c.event_id == event_id]
    class_ids = {c.id for c in classes}
    rules = [r for r in repo.list_event_class_rules() if r.event_class_id in class_ids]
    return len(classes), len(rules)


# ---------------------------------------------------------------------------
# Tracks
# ---------------------------------------------------------------------------

def test_create_and_list_track(repo):
    track_id = repo.create_track("Test Track", "Test City", "123 Test St", "https://test.com")
    tracks = repo.list_tracks()
    assert len(tracks) == 1
    assert tracks[0].id == track_id
    assert tracks[0].name == "Test Track"
    assert tracks[0].city == "Test City"


def test_tracks_ordered_by_name(repo):
    for name in ["Xtreme Raceway Park", "Bandimere", "Texas Motorplex"]:
        repo.create_track(name, "", "", "")
    assert [t.name for t in repo.list_tracks()] == ["Bandimere", "Texas Motorplex", "Xtreme Raceway Park"]


def test_null_text_columns_read_as_empty(repo, engine):
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO tracks(name) VALUES('Bare Track')"))
    track = repo.list_tracks()[0]
    assert (track.city, track.address, track.url) == ("", "", "")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

def test_create_event_without_end_date(repo, track_id):
    repo.create_event("Test Event", track_id, "2025-10-03 08:00:00", "", None, None, "", "")
    event = repo.list_events()[0]
    assert event.end_date is None
    assert event.driver_fee is None
    assert event.spectator_fee is None
    assert event.timestamp_fallbacks == []


def test_empty_end_date_stored_as_null(repo, engine, track_id):
    event_id = repo.create_event("Test Event", track_id, "2025-10-03 08:00:00", "")
    with engine.connect() as conn:
        stored = conn.execute(text("SELECT end_date FROM events WHERE id = :id"), {"id": event_id}).scalar_one()
    assert stored is None


def test_create_event_full_round_trip(repo, track_id):
    event_id = repo.create_event(
        "Fall Nationals", track_id, "2025-10-03 08:00:00", "2025-10-12 18:00:00",
        50.0, 20.5, "https://example.com", "NHRA fall event",
    )
    event = repo.list_events()[0]
    assert event.id == event_id
    assert event.track_name == "Test Track"
    assert event.start_date == dt.datetime(2025, 10, 3, 8, 0, tzinfo=UTC)
    assert event.end_date == dt.datetime(2025, 10, 12, 18, 0, tzinfo=UTC)
    assert event.driver_fee == 50.0
    assert event.spectator_fee == 20.5
    assert event.url == "https://example.com"
    assert event.description == "NHRA fall event"


@pytest.mark.parametrize("fee", [0.0, 0.1, 12.345678901234567, 1e-7, 99999.99])
def test_optional_fees_round_trip_exactly(repo, track_id, fee):
    event_id = repo.create_event("Fees", track_id, "2025-10-03 08:00:00", "", fee, fee)
    repo.create_event_class(event_id, "Class", fee)
    event = repo.list_events()[0]
    assert event.driver_fee == fee
    assert event.spectator_fee == fee
    assert repo.list_event_classes()[0].buyin_fee == fee


def test_zero_fee_is_not_absent(repo, track_id):
    repo.create_event("Free", track_id, "2025-10-03 08:00:00", "", 0.0, None)
    event = repo.list_events()[0]
    assert event.driver_fee == 0.0
    assert event.driver_fee is not None
    assert event.spectator_fee is None


def test_events_ordered_by_start_time(repo, track_id):
    starts = ["2025-12-01 10:00:00", "2025-01-15 08:00:00", "2025-06-30 18:30:00", "2025-06-30 09:00:00"]
    for i, start in enumerate(starts):
        repo.create_event(f"Event {i}", track_id, start, "")
    dates = [e.start_date for e in repo.list_events()]
    assert dates == sorted(dates)
    assert len(dates) == len(starts)


def test_events_ordered_by_start_time_across_formats(repo, track_id):
    repo.create_event("ISO", track_id, "2025-10-03T08:00:00Z", "")
    repo.create_event("Plain", track_id, "2025-10-03 09:00:00", "")
    repo.create_event("Offset", track_id, "2025-10-03 07:00:00-05:00", "")
    repo.create_event("Date only", track_id, "2025-10-03", "")
    events = repo.list_events()
    dates = [e.start_date for e in events]
    assert dates == sorted(dates)
    assert [e.title for e in events] == ["Date only", "ISO", "Plain", "Offset"]


def test_create_event_unknown_track_raises(repo):
    with pytest.raises(IntegrityError):
        repo.create_event("Orphan", 999, "2025-10-03 08:00:00", "")


def test_unparseable_dates_are_tagged(repo, engine, track_id):
    with engine.begin() as conn:
        conn.execute(text(
            "INSERT INTO events(title, track_id, event_datetime, end_date) "
            "VALUES('Bad dates', :track_id, 'someday', 'later')"
        ), {"track_id": track_id})
    event = repo.list_events()[0]
    assert event.start_date == ZERO_TIMESTAMP
    assert event.end_date is None
    assert event.timestamp_fallbacks == ["start_date", "end_date"]
    assert event.has_fallback_dates


# ---------------------------------------------------------------------------
# Classes and rules
# ---------------------------------------------------------------------------

def test_classes_and_rules_ordering(repo, track_id):
    first = repo.create_event("First", track_id, "2025-10-03 08:00:00", "")
    second = repo.create_event("Second", track_id, "2025-10-04 08:00:00", "")
    c_second = repo.create_event_class(second, "B")
    c_first_a = repo.create_event_class(first, "A1")
    c_first_b = repo.create_event_class(first, "A2", 25.0)
    repo.create_event_class_rule(c_first_b, "rule 1")
    repo.create_event_class_rule(c_first_a, "rule 2")
    repo.create_event_class_rule(c_first_b, "rule 3")

    classes = repo.list_event_classes()
    assert [(c.event_id, c.id) for c in classes] == sorted((c.event_id, c.id) for c in classes)
    assert [c.id for c in classes] == [c_first_a, c_first_b, c_second]
    assert classes[0].buyin_fee is None

    rules = repo.list_event_class_rules()
    assert [(r.event_class_id, r.rule) for r in rules] == [
        (c_first_a, "rule 2"), (c_first_b, "rule 1"), (c_first_b, "rule 3"),
    ]


def test_class_for_unknown_event_raises(repo):
    with pytest.raises(IntegrityError):
        repo.create_event_class(12345, "Ghost")


# ---------------------------------------------------------------------------
# Delete cascade
# ---------------------------------------------------------------------------

def test_delete_event_removes_only_its_classes_and_rules(repo, track_id):
    a = repo.create_event("A", track_id, "2025-10-03 08:00:00", "")
    b = repo.create_event("B", track_id, "2025-10-04 08:00:00", "")
    for event_id, n_classes in [(a, 2), (b, 3)]:
        for i in range(n_classes):
            class_id = repo.create_event_class(event_id, f"class {i}")
            repo.create_event_class_rule(class_id, "one")
            repo.create_event_class_rule(class_id, "two")

    before_b = _class_and_rule_counts(repo, b)
    repo.delete_event(a)

    assert [e.id for e in repo.list_events()] == [b]
    assert _class_and_rule_counts(repo, a) == (0, 0)
    assert _class_and_rule_counts(repo, b) == before_b == (3, 6)


def test_delete_event_cascades_without_foreign_keys(engine, db_path, track_id):
    plain = create_engine(f"sqlite:///{db_path}")
    try:
        with plain.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar_one() == 0
        repo = Repository(plain)
        a = repo.create_event("A", track_id, "2025-10-03 08:00:00", "")
        b = repo.create_event("B", track_id, "2025-10-04 08:00:00", "")
        for event_id in (a, b):
            class_id = repo.create_event_class(event_id, "Pro Mod")
            repo.create_event_class_rule(class_id, "one")
            repo.create_event_class_rule(class_id, "two")

        repo.delete_event(a)

        assert [e.id for e in repo.list_events()] == [b]
        assert _class_and_rule_counts(repo, a) == (0, 0)
        assert _class_and_rule_counts(repo, b) == (1, 2)
        assert repo.count("event_classes") == 1
        assert repo.count("event_class_rules") == 2
    finally:
        plain.dispose()


def test_delete_missing_event_is_noop(repo, track_id):
    repo.create_event("Keep", track_id, "2025-10-03 08:00:00", "")
    repo.delete_event(4242)
    assert len(repo.list_events()) == 1


def test_delete_event_twice(seeded_repo):
    seeded_repo.delete_event(1)
    seeded_repo.delete_event(1)
    assert seeded_repo.count("events") == 1


# ---------------------------------------------------------------------------
# Seed scenario
# ---------------------------------------------------------------------------

def test_seed_counts(seeded_repo):
    assert seeded_repo.count("tracks") == 2
    assert seeded_repo.count("events") == 2
    assert seeded_repo.count("event_classes") == 3
    assert seeded_repo.count("event_class_rules") == 7


def test_seed_events_ordered_by_start(seeded_repo):
    events = seeded_repo.list_events()
    assert [e.title for e in events] == ["Fall Nationals", "Friday Night Drags"]
    assert events[0].start_date < events[1].start_date


def test_seed_delete_first_event(seeded_repo):
    seeded_repo.delete_event(1)
    events = seeded_repo.list_events()
    assert len(events) == 1
    assert events[0].title == "Friday Night Drags"

    classes = seeded_repo.list_event_classes()
    assert [(c.event_id, c.name) for c in classes] == [(2, "Test & Tune")]
    rules = seeded_repo.list_event_class_rules()
    assert len(rules) == 2
    assert {r.event_class_id for r in rules} == {classes[0].id}


def test_count_rejects_unknown_table(repo):
    with pytest.raises(ValueError):
        repo.count("sqlite_master")
