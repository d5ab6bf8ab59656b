from sitemapcrawl.domain import CrawlFailure, CrawlSkipped, CrawlSuccess, RunSummary


def test_counts_by_outcome_kind():
    error = RuntimeError("boom")
    summary = RunSummary.from_outcomes(
        [
            CrawlSuccess(url="https://example.com/a", file_path="/out/a.md"),
            CrawlFailure(url="https://example.com/b", error=error, attempts=4),
            CrawlSkipped(url="https://example.com/c"),
        ],
        halted=True,
    )

    assert summary.as_dict() == {"total": 3, "succeeded": 1, "failed": 1, "skipped": 1, "halted": True}
    assert summary.failures == [CrawlFailure(url="https://example.com/b", error=error, attempts=4)]


def test_empty_summary():
    summary = RunSummary.from_outcomes([])
    assert summary.total == 0
    assert summary.failures == []
    assert not summary.halted


def test_failure_message_falls_back_to_exception_name():
    assert CrawlFailure(url="u", error=TimeoutError()).message == "TimeoutError"
    assert CrawlFailure(url="u", error=ValueError("bad")).message == "bad"
