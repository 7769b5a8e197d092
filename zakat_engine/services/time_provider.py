"""Time provider abstraction for testable cache expiry.

All times in this module are UTC. The cache backends ask the provider for
the current time when storing and reading entries, so tests can freeze and
advance the clock instead of sleeping.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional


class TimeProvider:
    """Provides the current time, allowing tests to freeze it.

    Usage:
        # Production: uses real UTC time
        provider = TimeProvider()
        now = provider.now()

        # Testing: freeze at a specific instant, then move forward
        provider = TimeProvider(frozen_at=datetime(2026, 1, 15, tzinfo=timezone.utc))
        provider.advance(seconds=3601)
    """

    _instance: Optional['TimeProvider'] = None

    def __init__(self, frozen_at: Optional[datetime] = None):
        """Initialize TimeProvider.

        Args:
            frozen_at: If provided, now() returns this instant until advanced.
                       Used for testing. If None, returns actual UTC time.
        """
        self._frozen_at = frozen_at

    def now(self) -> datetime:
        """Get current UTC time, or the frozen instant if set."""
        if self._frozen_at is not None:
            return self._frozen_at
        return datetime.now(timezone.utc)

    def advance(self, seconds: float) -> None:
        """Move a frozen clock forward."""
        if self._frozen_at is None:
            raise RuntimeError('Only a frozen TimeProvider can be advanced')
        self._frozen_at = self._frozen_at + timedelta(seconds=seconds)

    @classmethod
    def get_default(cls) -> 'TimeProvider':
        """Get the default TimeProvider instance (singleton for production)."""
        if cls._instance is None:
            cls._instance = TimeProvider()
        return cls._instance

    @classmethod
    def set_default(cls, provider: 'TimeProvider') -> None:
        """Set the default TimeProvider (for testing)."""
        cls._instance = provider

    @classmethod
    def reset_default(cls) -> None:
        """Reset to production TimeProvider."""
        cls._instance = None
