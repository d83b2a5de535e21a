"""Rate limiting for assistant questions - Legally Legit AI"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

SWEEP_INTERVAL = timedelta(minutes=1)


class RateLimiter:
    def __init__(self):
        # In-memory sliding window per key (single process)
        self.attempts: Dict[str, List[datetime]] = {}
        self.windows: Dict[str, timedelta] = {}
        self._last_sweep: Optional[datetime] = None

    async def check_rate_limit(
        self,
        key: str,
        max_attempts: int,
        window_minutes: int
    ) -> Tuple[bool, Optional[str]]:
        """
        Check and record one attempt for ``key``.

        Returns:
            (allowed, error_message)
        """
        now = datetime.now(timezone.utc)
        window = timedelta(minutes=window_minutes)
        self._sweep(now)

        recent = [t for t in self.attempts.get(key, []) if now - t < window]
        if recent:
            self.attempts[key] = recent
        else:
            self.attempts.pop(key, None)
            self.windows.pop(key, None)

        if len(recent) >= max_attempts:
            oldest = min(recent) if recent else now
            wait_seconds = max(int((oldest + window - now).total_seconds()), 1)
            logger.warning(f"Rate limit hit for {key} ({len(recent)}/{max_attempts})")
            return False, f"Rate limit exceeded. Try again in {wait_seconds} seconds"

        self.attempts[key] = recent + [now]
        self.windows[key] = window
        return True, None

    def _sweep(self, now: datetime) -> None:
        """Drop keys whose newest attempt has left its window."""
        if self._last_sweep is not None and now - self._last_sweep < SWEEP_INTERVAL:
            return
        self._last_sweep = now
        stale = [
            key for key, stamps in self.attempts.items()
            if not stamps or now - max(stamps) >= self.windows.get(key, timedelta(0))
        ]
        for key in stale:
            self.attempts.pop(key, None)
            self.windows.pop(key, None)
        if stale:
            logger.debug(f"Pruned {len(stale)} idle rate limit key(s)")

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self.attempts.clear()
            self.windows.clear()
            self._last_sweep = None
        else:
            self.attempts.pop(key, None)
            self.windows.pop(key, None)


rate_limiter = RateLimiter()
