from datetime import date

from astrocal.schemas.transits import CalendarEvent
from astrocal.services.chart_store import BIRTH_CHART_KEY, EVENTS_KEY, ChartStore, InMemoryStore
from fakes import ALL_BODIES_AT, make_chart

DAY = date(2024, 3, 15)


def _event(event_id, day=DAY, title="Dentist"):
    return CalendarEvent(id=event_id, title=title, date=day, start_time=540, end_time=600)


def test_birth_chart_round_trip():
    store = ChartStore()
    assert store.load_birth_chart() is None
    chart = make_chart(ALL_BODIES_AT)
    store.save_birth_chart(chart)
    assert store.load_birth_chart() == chart
    store.clear_birth_chart()
    assert store.load_birth_chart() is None


def test_corrupt_birth_chart_reads_as_missing():
    kv = InMemoryStore()
    kv.set(BIRTH_CHART_KEY, '{"sun": "not a position"}')
    assert ChartStore(kv).load_birth_chart() is None


def test_event_crud():
    store = ChartStore()
    store.add_event(_event("e1"))
    store.add_event(_event("e2", day=date(2024, 3, 16)))
    assert [e.id for e in store.load_events()] == ["e1", "e2"]

    assert store.edit_event(_event("e1", title="Dentist (moved)"))
    assert store.load_events()[0].title == "Dentist (moved)"
    assert not store.edit_event(_event("nope"))

    assert store.delete_event("e2")
    assert not store.delete_event("e2")
    assert [e.id for e in store.load_events()] == ["e1"]


def test_corrupt_events_read_as_empty():
    kv = InMemoryStore()
    kv.set(EVENTS_KEY, "[{]")
    assert ChartStore(kv).load_events() == []


def test_day_without_birth_chart_has_only_user_events(fixed_client):
    store = ChartStore()
    store.add_event(_event("e1"))
    store.add_event(_event("e2", day=date(2024, 3, 16)))
    assert [e.id for e in store.events_for_date(DAY, fixed_client)] == ["e1"]


def test_day_merges_transits_after_user_events(fixed_client):
    store = ChartStore()
    store.save_birth_chart(make_chart(ALL_BODIES_AT))
    store.add_event(_event("e1"))
    events = store.events_for_date(DAY, fixed_client)
    assert events[0].id == "e1"
    assert len(events) > 1
    assert all(e.id.startswith("transit-20240315-") for e in events[1:])


def test_user_event_shadows_transit_with_same_id(fixed_client):
    store = ChartStore()
    store.save_birth_chart(make_chart(ALL_BODIES_AT))
    transit_ids = [e.id for e in store.events_for_date(DAY, fixed_client)]
    store.add_event(_event(transit_ids[0], title="My note"))
    events = store.events_for_date(DAY, fixed_client)
    assert [e.id for e in events].count(transit_ids[0]) == 1
    assert events[0].title == "My note"
