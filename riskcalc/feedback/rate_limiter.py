"""Per-client sliding-window rate limiter for feedback submissions.

In-memory only: counts reset when the process restarts.
"""

import time
from typing import Callable


class SubmissionRateLimiter:
    """Allow at most *max_submissions* per client within *window_seconds*.

    Args:
        max_submissions: Submissions allowed per window (default 3).
        window_seconds: Length of the rolling window (default 1 hour).
        max_clients: Client count above which stale entries are swept.
        clock: Time source, injectable for tests.
    """

    def __init__(
        self,
        max_submissions: int = 3,
        window_seconds: float = 3600.0,
        max_clients: int = 1000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_submissions <= 0:
            raise ValueError(f"max_submissions must be positive, got {max_submissions}")
        self._max = max_submissions
        self._window = window_seconds
        self._max_clients = max_clients
        self._clock = clock
        self._submissions: dict[str, list[float]] = {}

    def allow(self, client_id: str) -> bool:
        """Record a submission for *client_id* if it is within the limit.

        Returns ``False`` (and records nothing) when the limit is reached.
        """
        now = self._clock()
        cutoff = now - self._window

        recent = [t for t in self._submissions.get(client_id, []) if t > cutoff]
        if len(recent) >= self._max:
            self._submissions[client_id] = recent
            return False

        recent.append(now)
        self._submissions[client_id] = recent

        if len(self._submissions) > self._max_clients:
            self._sweep(cutoff)
        return True

    def _sweep(self, cutoff: float) -> None:
        stale = [
            key for key, times in self._submissions.items()
            if all(t <= cutoff for t in times)
        ]
        for key in stale:
            del self._submissions[key]

    @property
    def tracked_clients(self) -> int:
        return len(self._submissions)
