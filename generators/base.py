"""Base generator class with seeded RNG and timestamp helpers."""

import random
from datetime import UTC, datetime, timedelta
from typing import Any

import numpy as np


class BaseGenerator:
    def __init__(self, config: dict[str, Any] | None = None, seed: int = 42):
        self.config = config or {}
        self.seed = seed
        random.seed(seed)
        np.random.seed(seed)

    def _start_time(self) -> datetime:
        start = self.config.get("start_time")
        if isinstance(start, datetime):
            return start if start.tzinfo else start.replace(tzinfo=UTC)
        if isinstance(start, str):
            parsed = datetime.fromisoformat(start)
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
        return datetime(2026, 1, 1, 9, 0, tzinfo=UTC)

    def _next_time(self, current: datetime, mean_gap_seconds: float) -> datetime:
        """Advance by an exponential inter-arrival gap (Poisson arrivals), at least 1 ms."""
        gap = float(np.random.exponential(mean_gap_seconds)) if mean_gap_seconds > 0 else 0.0
        return current + timedelta(seconds=max(gap, 0.001))

    def _weighted_choice(self, options: dict[str, float]) -> str:
        """Choose from weighted options."""
        items = list(options.keys())
        weights = list(options.values())
        return random.choices(items, weights=weights, k=1)[0]
