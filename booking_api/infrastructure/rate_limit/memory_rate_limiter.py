import threading
import time
from typing import Dict, List

from ...application.ports.rate_limiter import RateLimiter


class InMemoryRateLimiter(RateLimiter):
    def __init__(self) -> None:
        self._store: Dict[str, List[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = 0.0

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = time.time()
        window_start = now - window_seconds
        with self._lock:
            # prune
            times = [t for t in self._store.get(key, []) if t > window_start]
            if len(times) >= max_requests:
                self._store[key] = times
                return False
            if self._last_sweep <= window_start:
                self._evict_idle(window_start)
                self._last_sweep = now
            times.append(now)
            self._store[key] = times
            return True

    def _evict_idle(self, window_start: float) -> None:
        # drop clients whose last request left the window
        idle = [k for k, times in self._store.items() if not times or times[-1] <= window_start]
        for k in idle:
            del self._store[k]
