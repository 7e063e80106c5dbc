from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional
import threading


DRAW_COOLDOWN_SECONDS = 5


@dataclass(frozen=True)
class CooldownDecision:
    accepted: bool
    remaining_seconds: int = 0


class CooldownGuard:
    """Per-user draw throttle.

    `now` is supplied by the caller (monotonic seconds). Entries are never
    evicted; one float per user who has ever drawn.
    """

    def __init__(self, window_seconds: float = DRAW_COOLDOWN_SECONDS):
        self.window_seconds = float(window_seconds)
        self._last_draw: Dict[int, float] = {}
        self._lock = threading.Lock()

    def check_and_mark(self, user_id: int, now: float) -> CooldownDecision:
        with self._lock:
            prev = self._last_draw.get(user_id)
            if prev is not None:
                elapsed = now - prev
                if elapsed < self.window_seconds:
                    # Whole seconds, floored, but never shown as 0.
                    remaining = max(1, int(self.window_seconds - elapsed))
                    return CooldownDecision(accepted=False, remaining_seconds=remaining)
            self._last_draw[user_id] = now
        return CooldownDecision(accepted=True)

    def last_draw_at(self, user_id: int) -> Optional[float]:
        with self._lock:
            return self._last_draw.get(user_id)
