from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from sitemapcrawl.domain.crawl_outcome import CrawlFailure, CrawlOutcome, CrawlSkipped, CrawlSuccess


@dataclass(frozen=True)
class RunSummary:
    """Aggregate result of one batch run.

    `outcomes` is aligned with the input targets. `halted` is True when the run
    stopped submitting work after a failure.
    """

    outcomes: tuple = field(default_factory=tuple)
    halted: bool = False

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[CrawlOutcome], halted: bool = False) -> "RunSummary":
        return cls(outcomes=tuple(outcomes), halted=halted)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, CrawlSuccess))

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, CrawlFailure))

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, CrawlSkipped))

    @property
    def failures(self) -> list[CrawlFailure]:
        return [o for o in self.outcomes if isinstance(o, CrawlFailure)]

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "halted": self.halted,
        }
