"""Persistence for the registered birth chart and user calendar events.

The backing store is an opaque string key-value store. The in-memory
implementation is only suitable for development and tests; it keeps values
in-process and is protected by a threading lock for concurrent access from
API worker threads.
"""

import json
import logging
import threading
from datetime import date as Date
from typing import Dict, List, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from ..schemas.charts import Chart
from ..schemas.transits import CalendarEvent, TransitEvent
from .ephem import EphemerisClient
from .transits_engine import get_transit_events_for_date

logger = logging.getLogger(__name__)

BIRTH_CHART_KEY = "birthChart"
EVENTS_KEY = "events"

_EVENTS = TypeAdapter(List[CalendarEvent])


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStore:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class ChartStore:
    def __init__(self, kv: Optional[KeyValueStore] = None) -> None:
        self.kv = kv if kv is not None else InMemoryStore()

    # Birth chart -------------------------------------------------------

    def save_birth_chart(self, chart: Chart) -> None:
        self.kv.set(BIRTH_CHART_KEY, chart.model_dump_json())

    def load_birth_chart(self) -> Optional[Chart]:
        """Stored natal chart, or None when missing or unreadable."""
        raw = self.kv.get(BIRTH_CHART_KEY)
        if not raw:
            return None
        try:
            return Chart.model_validate_json(raw)
        except ValidationError:
            logger.warning("birth_chart_unreadable", exc_info=True)
            return None

    def clear_birth_chart(self) -> None:
        self.kv.delete(BIRTH_CHART_KEY)

    # User events -------------------------------------------------------

    def load_events(self) -> List[CalendarEvent]:
        raw = self.kv.get(EVENTS_KEY)
        if not raw:
            return []
        try:
            return _EVENTS.validate_json(raw)
        except ValidationError:
            logger.warning("events_unreadable", exc_info=True)
            return []

    def save_events(self, events: List[CalendarEvent]) -> None:
        payload = [e.model_dump(mode="json") for e in events]
        self.kv.set(EVENTS_KEY, json.dumps(payload))

    def add_event(self, event: CalendarEvent) -> None:
        events = self.load_events()
        events.append(event)
        self.save_events(events)

    def edit_event(self, event: CalendarEvent) -> bool:
        events = self.load_events()
        found = False
        for i, existing in enumerate(events):
            if existing.id == event.id:
                events[i] = event
                found = True
        if found:
            self.save_events(events)
        return found

    def delete_event(self, event_id: str) -> bool:
        events = self.load_events()
        kept = [e for e in events if e.id != event_id]
        if len(kept) == len(events):
            return False
        self.save_events(kept)
        return True

    def events_for_date(self, day: Date, client: Optional[EphemerisClient] = None) -> List[CalendarEvent]:
        """User events for ``day`` followed by transit events not shadowed by them."""
        user_events = [e for e in self.load_events() if e.date == day]
        transits = get_transit_events_for_date(day, self.load_birth_chart(), client)
        return merge_events(user_events, transits)


def merge_events(user_events: List[CalendarEvent], transits: List[TransitEvent]) -> List[CalendarEvent]:
    existing_ids = {e.id for e in user_events}
    return list(user_events) + [t for t in transits if t.id not in existing_ids]


# Global singleton store used by the API.
STORE = ChartStore()
