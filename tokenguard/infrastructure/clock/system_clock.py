"""System clock - wall-clock implementation of IClock."""

from datetime import UTC, datetime

from tokenguard.domain.services.clock import IClock


class SystemClock(IClock):
    """Reads the current UTC time from the operating system."""

    def now(self) -> datetime:
        return datetime.now(UTC)
