"""Clock interface - the time source for expiry and lockout decisions.

Every component that compares against "now" receives an IClock instead of
calling datetime.now() directly, so tests can move time deterministically.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class IClock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """
        Return the current time.

        Returns:
            Timezone-aware UTC datetime
        """
        pass
