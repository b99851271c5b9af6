"""
Service / facade layer for visits.

All visit writes go through `VisitService` so timestamps are always
assigned by the server, never by the caller. Aggregates are computed
on every call from a full read of the store; nothing is cached.
"""

import logging
from datetime import timedelta
from typing import Iterable, Optional, Tuple

from clock import TimeSource, calendar_date
from event_store import VisitStore
from models import Visit, VisitCounts
from sessions import resolve_session_id

logger = logging.getLogger(__name__)

# Inclusive on both ends: today and the 7 dates before it (8 dates).
WINDOW_DAYS = 7


def count_recent(timestamps: Iterable[str], now_iso: str) -> Tuple[int, int]:
    """Return `(today, last_7_days)` using calendar dates only."""
    today = calendar_date(now_iso)
    window_start = today - timedelta(days=WINDOW_DAYS)
    today_count = 0
    window_count = 0
    for ts in timestamps:
        day = calendar_date(ts)
        if day == today:
            today_count += 1
        if window_start <= day <= today:
            window_count += 1
    return today_count, window_count


class VisitService:
    """Stamps and records visits; answers visit count queries.

    Example usage:
        store = JsonEventStore(settings.storage_path)
        svc = VisitService(store, SystemClock())
        session_id = svc.record_visit(browser="Firefox", screen="1280x720")
    """

    def __init__(self, store: VisitStore, clock: TimeSource):
        self.store = store
        self.clock = clock

    def record_visit(self, session_id: Optional[str] = None, **attributes) -> str:
        """Persist one visit and return its session id.

        `attributes` are the optional descriptive fields (`country`,
        `browser`, `os`, `deviceType`, `language`, `referrer`, `screen`).
        Values that are None are left out of the stored record.
        """
        attributes.pop("timestamp", None)
        session_id = resolve_session_id(session_id)
        data = {k: v for k, v in attributes.items() if v is not None}
        visit = Visit.model_validate(
            {**data, "sessionId": session_id, "timestamp": self.clock.now_iso()}
        )
        self.store.record_visit(visit)
        logger.debug("Recorded visit for session %s", session_id)
        return session_id

    def get_visit_counts(self) -> VisitCounts:
        visits = self.store.get_all_visits()
        today, last_7_days = count_recent((v.timestamp for v in visits), self.clock.now_iso())
        return VisitCounts(total=len(visits), today=today, last_7_days=last_7_days)
