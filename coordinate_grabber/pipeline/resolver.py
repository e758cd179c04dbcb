"""Sequential, rate-limited resolution of address records."""

from __future__ import annotations

import time
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..geocoding.outcome import FailureKind, LookupOutcome
from ..geocoding.strategy import GeocodingStrategy
from ..models import AddressRecord, GeocodeResult, RunSummary


class GeocodeResolver:
    """
    Resolve records one at a time through a GeocodingStrategy.

    Every record yields exactly one GeocodeResult, in input order. Failed
    lookups, including ones where the strategy raises, become empty-coordinate
    results and are counted, and the run carries on. After each lookup,
    whatever its outcome, the resolver pauses for the strategy's rate-limit
    delay before the next request.
    """

    def __init__(
        self,
        strategy: GeocodingStrategy,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.strategy = strategy
        self.sleep = sleep
        self.logger = logger or (lambda msg: None)

    def resolve(self, records: Sequence[AddressRecord]) -> Tuple[List[GeocodeResult], RunSummary]:
        summary = RunSummary(total_records=len(records))
        results = list(self.iter_resolve(records, summary))
        return results, summary

    def iter_resolve(
        self, records: Iterable[AddressRecord], summary: RunSummary
    ) -> Iterator[GeocodeResult]:
        total = summary.total_records
        delay = self.strategy.get_rate_limit_delay()
        for i, record in enumerate(records, start=1):
            try:
                result = self._resolve_one(record, summary, f"[{i}/{total}]")
            finally:
                self.sleep(delay)  # rate limit
            yield result

    def _resolve_one(self, record: AddressRecord, summary: RunSummary, prefix: str) -> GeocodeResult:
        try:
            outcome = self.strategy.lookup(record)
        except Exception as e:
            outcome = LookupOutcome.failed(FailureKind.UNEXPECTED, f"{type(e).__name__}: {e}"[:120])
            self.logger(f"{prefix} {record.street_address} -> lookup raised {outcome.detail}")
        if outcome.ok:
            self.logger(
                f"{prefix} {record.street_address} -> {outcome.latitude},{outcome.longitude}"
            )
            return GeocodeResult.resolved(record.street_address, outcome.latitude, outcome.longitude)

        summary.record_failure(outcome.failure.value)
        status = f" [{outcome.status}]" if outcome.status and outcome.status != "OK" else ""
        self.logger(f"{prefix} {record.street_address} -> failed ({outcome.failure.value}){status}")
        return GeocodeResult.failed(record.street_address)
