"""Folds per-event outcomes into the sweep result."""

from typing import Iterable

from app.models.sweep import AlertOutcome, SweepResult


def aggregate(outcomes: Iterable[AlertOutcome]) -> SweepResult:
    """Count outcomes in order.

    An event counts as successful when at least one channel delivered.
    Events skipped by the same-day dedup count as skipped only.
    """
    result = SweepResult()
    for outcome in outcomes:
        result.alerts.append(outcome)
        if outcome.skipped:
            result.skipped += 1
            continue
        result.processed += 1
        if outcome.delivered:
            result.successful += 1
        else:
            result.failed += 1
    return result
