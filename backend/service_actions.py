"""
Service / facade layer for actions.

Request validation happens at the HTTP boundary (`ActionIn` in
`main.py`); this service trusts its input but still builds a complete
`Action` record before handing it to the store.

Key responsibilities:
- stamp the server `timestamp`
- pass every caller-supplied attribute through unchanged
- compute statistics and filtered views over the full action log
"""

from collections import Counter
import logging
from typing import Any, Dict, List, Union

from clock import TimeSource, parse_instant
from event_store import ActionStore
from models import Action, ActionIn, ActionStats
from service_visits import count_recent

logger = logging.getLogger(__name__)


class ActionService:
    """Stamps and records actions; statistics and filters over them.

    Example usage:
        svc = ActionService(store, SystemClock())
        svc.record_action(ActionIn(name="cta_click", type="click", timeToAction=1200))
        svc.get_actions_by_type("click")
    """

    def __init__(self, store: ActionStore, clock: TimeSource):
        self.store = store
        self.clock = clock

    def record_action(self, data: Union[ActionIn, Dict[str, Any]]) -> None:
        """Persist one action with a server-assigned timestamp.

        A `timestamp` supplied by the caller is replaced.
        """
        if isinstance(data, ActionIn):
            data = data.to_dict()
        action = Action.model_validate({**data, "timestamp": self.clock.now_iso()})
        self.store.record_action(action)
        logger.debug("Recorded action %s (%s)", action.name, action.type)

    def get_all_actions(self) -> List[Action]:
        return self.store.get_all_actions()

    def get_action_stats(self) -> ActionStats:
        actions = self.store.get_all_actions()
        today, last_7_days = count_recent((a.timestamp for a in actions), self.clock.now_iso())
        total = len(actions)
        average = sum(a.time_to_action for a in actions) / total if total else 0
        return ActionStats(
            total=total,
            today=today,
            last_7_days=last_7_days,
            by_type=dict(Counter(a.type for a in actions)),
            by_name=dict(Counter(a.name for a in actions)),
            average_time_to_action=average,
        )

    def get_actions_by_type(self, action_type: str) -> List[Action]:
        return [a for a in self.store.get_all_actions() if a.type == action_type]

    def get_actions_by_name(self, name: str) -> List[Action]:
        return [a for a in self.store.get_all_actions() if a.name == name]

    def get_actions_by_date_range(self, start_date: str, end_date: str) -> List[Action]:
        """Actions whose timestamp lies in `[start_date, end_date]`.

        Bounds are full instants; a date-only bound means midnight UTC, so
        `end_date="2025-08-03"` excludes anything later on the 3rd.
        Raises `ValueError` when a bound cannot be parsed.
        """
        start = parse_instant(start_date)
        end = parse_instant(end_date)
        return [
            a for a in self.store.get_all_actions() if start <= parse_instant(a.timestamp) <= end
        ]
