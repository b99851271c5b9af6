import math

import pytest
from pydantic import ValidationError

from models import Action, ActionIn, ActionStats, StorageDocument, Visit


def test_action_in_accepts_required_fields():
    action = ActionIn.model_validate({"name": "cta_click", "type": "click", "timeToAction": 1200})
    assert action.name == "cta_click"
    assert action.time_to_action == 1200


def test_action_in_keeps_extra_fields():
    payload = {
        "name": "cta_click",
        "type": "click",
        "timeToAction": 12.5,
        "scrollPosition": 100,
        "metadata": {"campaign": "summer_sale", "tags": ["a", "b"]},
    }
    assert ActionIn.model_validate(payload).to_dict() == payload


def test_action_in_omits_unset_optional_fields():
    data = ActionIn.model_validate({"name": "a", "type": "click", "timeToAction": 1}).to_dict()
    assert set(data) == {"name", "type", "timeToAction"}


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "click", "timeToAction": 5000},
        {"name": "a", "timeToAction": 5000},
        {"name": "a", "type": "click"},
        {"name": "", "type": "click", "timeToAction": 5000},
        {"name": "a", "type": "", "timeToAction": 5000},
        {"name": "a", "type": "click", "timeToAction": "5000"},
        {"name": "a", "type": "click", "timeToAction": True},
        {"name": "a", "type": "click", "timeToAction": -1},
        {"name": "a", "type": "click", "timeToAction": math.nan},
        {"name": 42, "type": "click", "timeToAction": 5000},
    ],
)
def test_action_in_rejects_invalid(payload):
    with pytest.raises(ValidationError):
        ActionIn.model_validate(payload)


def test_action_requires_timestamp():
    with pytest.raises(ValidationError):
        Action.model_validate({"name": "a", "type": "click", "timeToAction": 1})


def test_visit_round_trips_unknown_fields():
    raw = {"sessionId": "123", "timestamp": "2025-08-01T10:00:00.000Z", "country": "CZ", "path": "/"}
    assert Visit.model_validate(raw).to_dict() == raw


def test_storage_document_to_dict():
    doc = StorageDocument(visits=[Visit(timestamp="2025-08-01T10:00:00.000Z")])
    assert doc.to_dict() == {"visits": [{"timestamp": "2025-08-01T10:00:00.000Z"}], "actions": []}


def test_action_stats_serializes_with_wire_names():
    stats = ActionStats(
        total=0, today=0, last_7_days=0, by_type={}, by_name={}, average_time_to_action=0
    )
    assert stats.model_dump(by_alias=True) == {
        "total": 0,
        "today": 0,
        "last7Days": 0,
        "byType": {},
        "byName": {},
        "averageTimeToAction": 0,
    }


def test_action_in_ignores_attribute_names_as_input():
    with pytest.raises(ValidationError):
        ActionIn.model_validate({"name": "a", "type": "click", "time_to_action": 5})

    action = ActionIn.model_validate(
        {"name": "a", "type": "click", "timeToAction": 5, "user_id": "u1", "element_id": "e1"}
    )
    assert action.user_id is None
    assert action.element_id is None
    assert action.to_dict() == {
        "name": "a",
        "type": "click",
        "timeToAction": 5,
        "user_id": "u1",
        "element_id": "e1",
    }


def test_visit_keeps_snake_case_keys_as_extras():
    raw = {"timestamp": "2025-08-01T10:00:00.000Z", "session_id": "abc", "device_type": "tv"}
    visit = Visit.model_validate(raw)
    assert visit.session_id is None
    assert visit.to_dict() == raw


@pytest.mark.parametrize("value,kind", [(5000, int), (12.5, float), (0, int)])
def test_time_to_action_keeps_number_type(value, kind):
    action = ActionIn.model_validate({"name": "a", "type": "click", "timeToAction": value})
    assert type(action.time_to_action) is kind
    assert action.to_dict()["timeToAction"] == value
