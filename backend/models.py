"""
Pydantic models used across the backend.

Records keep their wire names (camelCase) as aliases while exposing
snake_case attributes. Input is matched by wire name only, so a key
such as `user_id` stays an extra attribute instead of filling `userId`.
Extra keys are allowed so caller-supplied attributes round-trip
through storage without loss.

Guidelines:
- `ActionIn` is the boundary shape validated in `main.py`. `Action` is
    what the store holds: the same fields plus the server `timestamp`.
- Serialize records with `to_dict()` so unset optional fields are left
    out instead of being written as null.
"""

from pydantic import BaseModel, ConfigDict, Field, confloat, conint
from typing import Any, Dict, List, Optional, Union


class Record(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class Visit(Record):
    """One recorded page load.

    `session_id` is optional on read because visits written before
    sessions existed carry only a timestamp.
    """

    timestamp: str
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    country: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    device_type: Optional[str] = Field(default=None, alias="deviceType")
    language: Optional[str] = None
    referrer: Optional[str] = None
    screen: Optional[str] = None


class ActionIn(Record):
    """Input shape for an action sent by clients.

    Fields:
    - `name`: label chosen by the instrumenting page, e.g. `newsletter_signup`.
    - `type`: category such as `click` or `submit`.
    - `timeToAction`: milliseconds since page load. Must be a real
      number; `"5000"` is rejected.
    - anything else is kept verbatim as an extra attribute.
    """

    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    time_to_action: Union[
        conint(strict=True, ge=0), confloat(strict=True, ge=0, allow_inf_nan=False)
    ] = Field(alias="timeToAction")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    user_id: Optional[str] = Field(default=None, alias="userId")
    url: Optional[str] = None
    element_id: Optional[str] = Field(default=None, alias="elementId")
    element_class: Optional[str] = Field(default=None, alias="elementClass")
    value: Any = None
    metadata: Any = None


class Action(ActionIn):
    timestamp: str


class StorageDocument(BaseModel):
    """On-disk container: two insertion-ordered collections."""

    model_config = ConfigDict(extra="allow")

    visits: List[Visit] = Field(default_factory=list)
    actions: List[Action] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"visits", "actions"})
        data["visits"] = [v.to_dict() for v in self.visits]
        data["actions"] = [a.to_dict() for a in self.actions]
        return data


class VisitCounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    today: int
    last_7_days: int = Field(alias="last7Days")


class ActionStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    today: int
    last_7_days: int = Field(alias="last7Days")
    by_type: Dict[str, int] = Field(alias="byType")
    by_name: Dict[str, int] = Field(alias="byName")
    average_time_to_action: float = Field(alias="averageTimeToAction")
