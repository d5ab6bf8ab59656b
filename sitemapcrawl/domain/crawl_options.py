from __future__ import annotations

from dataclasses import dataclass

MAX_RETRY_DELAY_MS = 60_000
BACKOFF_FACTOR = 2.0


@dataclass(frozen=True)
class CrawlOptions:
    """Run-wide settings, built once from CLI input."""

    continue_on_error: bool = False
    max_retries: int = 3
    initial_retry_delay_ms: int = 1000
    rate_per_second: int = 1
    debug: bool = False
    max_retry_delay_ms: int = MAX_RETRY_DELAY_MS
    backoff_factor: float = BACKOFF_FACTOR

    def __post_init__(self):
        for name in ("max_retries", "initial_retry_delay_ms", "rate_per_second", "max_retry_delay_ms"):
            value = getattr(self, name)
            if value is None or int(value) < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if self.backoff_factor < 1:
            raise ValueError(f"backoff_factor must be >= 1, got {self.backoff_factor!r}")

    @property
    def throttled(self) -> bool:
        return self.rate_per_second > 0
