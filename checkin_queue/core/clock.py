"""
Wall-clock provider.

Every component reads "now" through a clock callable so that tests can
substitute a controllable one.
"""
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def make_clock(timezone_name: Optional[str] = None) -> Clock:
    """
    Build a clock returning timezone-aware local time.

    Args:
        timezone_name: IANA zone name; the host's local zone when omitted

    Returns:
        Zero-argument callable returning the current aware datetime
    """
    if timezone_name:
        tz = ZoneInfo(timezone_name)
        return lambda: datetime.now(tz)
    return lambda: datetime.now().astimezone()
