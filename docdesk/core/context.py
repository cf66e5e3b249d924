"""
Explicit application context handed to every store: settings, the optional
remote gateway and the clock.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from docdesk.core.config import Settings
from docdesk.gateway.remote import RemoteGateway


def parse_utc_offset(value: str) -> timezone:
    """``"+05:30"`` -> ``timezone(timedelta(hours=5, minutes=30))``."""
    sign = -1 if value.startswith("-") else 1
    hours, _, minutes = value.lstrip("+-").partition(":")
    return timezone(sign * timedelta(hours=int(hours), minutes=int(minutes or 0)))


def _local_clock(offset: str) -> Callable[[], datetime]:
    tz = parse_utc_offset(offset)

    def now() -> datetime:
        # Naive wall-clock time in the office timezone
        return datetime.now(tz).replace(tzinfo=None)

    return now


@dataclass
class AppContext:
    settings: Settings
    gateway: RemoteGateway | None = None
    clock: Callable[[], datetime] | None = field(default=None)

    def __post_init__(self) -> None:
        if self.clock is None:
            self.clock = _local_clock(self.settings.TIMEZONE_OFFSET)

    def now(self) -> datetime:
        return self.clock()  # type: ignore[misc]

    @property
    def remote(self) -> bool:
        """True when writes go through a connected gateway."""
        return self.gateway is not None and self.gateway.connected

    @property
    def mode(self) -> str:
        return "remote" if self.remote else "local"
