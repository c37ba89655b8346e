import uuid
from datetime import datetime, timezone


def timestamp() -> float:
    return datetime.now(timezone.utc).timestamp()


def to_datetime(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, timezone.utc)


def new_id() -> str:
    """Random 32 character hex identifier for threads and replies."""
    return uuid.uuid4().hex
