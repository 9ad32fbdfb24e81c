from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Naive UTC timestamp; storage columns are timezone-less."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
