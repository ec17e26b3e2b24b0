from datetime import datetime, timezone


def utcnow() -> datetime:
    # Stored timestamps are naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Clock:
    """Source of "now" for expiry, overdue and past-date checks."""

    def now(self) -> datetime:
        return utcnow()


class FrozenClock(Clock):
    """Clock pinned to a fixed instant; advance() moves it forward."""

    def __init__(self, at: datetime):
        self._at = to_naive_utc(at)

    def now(self) -> datetime:
        return self._at

    def advance(self, delta) -> None:
        self._at = self._at + delta


_system_clock = Clock()


def get_clock() -> Clock:
    return _system_clock
