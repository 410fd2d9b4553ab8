"""
Application runtime context.
Holds process-level metadata such as start time.
Must not import handlers or services.
"""
from datetime import datetime, timezone
from typing import Optional

_bot_start_time: Optional[datetime] = None


def set_bot_start_time(dt: datetime) -> None:
    global _bot_start_time
    _bot_start_time = dt


def get_bot_start_time() -> Optional[datetime]:
    return _bot_start_time


def get_uptime_seconds(now: Optional[datetime] = None) -> Optional[int]:
    """Seconds since set_bot_start_time(), or None if the bot has not started."""
    if _bot_start_time is None:
        return None
    now = now or datetime.now(timezone.utc)
    return max(0, int((now - _bot_start_time).total_seconds()))
