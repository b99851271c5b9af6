import re
import uuid
from typing import Optional

SESSION_PREFIX = "session_"

_UUID4 = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)


def new_session_id() -> str:
    return f"{SESSION_PREFIX}{uuid.uuid4()}"


def is_session_id(value: str) -> bool:
    """True for ids produced by `new_session_id()`."""
    if not value.startswith(SESSION_PREFIX):
        return False
    return bool(_UUID4.match(value[len(SESSION_PREFIX):]))


def resolve_session_id(supplied: Optional[str]) -> str:
    """Pass a client session id through, or mint one when absent/blank.

    Client ids are opaque (the beacon script generates its own format),
    so only emptiness is checked here.
    """
    if supplied is not None and supplied.strip():
        return supplied.strip()
    return new_session_id()
