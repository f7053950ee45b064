import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as naive UTC, the form every stored timestamp uses"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class RequestContext:
    """Per-request inputs handed explicitly to every service operation"""
    user_id: int
    now: datetime = field(default_factory=utcnow)
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    role: str = 'member'
