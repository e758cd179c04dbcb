"""End-to-end batch run: load, resolve, write."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Optional, Union

from ..geocoding.strategy import GeocodingStrategy
from ..models import RunSummary
from .loader import DEFAULT_DELIMITER, DEFAULT_ENCODING, load_addresses
from .resolver import GeocodeResolver
from .writer import write_results


def run_batch(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    strategy: GeocodingStrategy,
    delimiter: str = DEFAULT_DELIMITER,
    logger: Optional[Callable[[str], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
    encoding: str = DEFAULT_ENCODING,
) -> RunSummary:
    """
    Geocode every address in ``input_path`` and write the results to ``output_path``.

    The input is read completely before the first request, so a missing file
    or a malformed or undecodable line aborts the run without contacting the
    service. ``encoding`` applies to the input; the output is written as UTF-8.
    """
    log = logger or (lambda msg: None)
    records = load_addresses(input_path, delimiter=delimiter, logger=log, encoding=encoding)
    log(f"Loaded {len(records)} addresses from {input_path} ({strategy.get_source_name()})")

    resolver = GeocodeResolver(strategy, sleep=sleep, logger=log)
    results, summary = resolver.resolve(records)

    written = write_results(results, output_path, delimiter=delimiter)
    log(f"Wrote {written} rows to {output_path}")
    return summary
