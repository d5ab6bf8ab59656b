"""Per-target results.

An `AttemptResult` describes one try of the fetch/extract/write pipeline; a
`CrawlOutcome` is the single terminal result recorded for a target.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class AttemptResult:
    attempt: int
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, attempt: int, value: Any) -> "AttemptResult":
        return cls(attempt=attempt, value=value)

    @classmethod
    def failure(cls, attempt: int, error: BaseException) -> "AttemptResult":
        return cls(attempt=attempt, error=error)


@dataclass(frozen=True)
class CrawlSuccess:
    url: str
    file_path: str
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class CrawlFailure:
    url: str
    error: BaseException
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


@dataclass(frozen=True)
class CrawlSkipped:
    """The run halted before this target was started."""

    url: str

    @property
    def ok(self) -> bool:
        return False


CrawlOutcome = Union[CrawlSuccess, CrawlFailure, CrawlSkipped]
