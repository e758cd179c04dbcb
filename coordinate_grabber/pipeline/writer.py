"""Serialize GeocodeResults to a delimited file."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import IO, Iterable, Union

from ..models import GeocodeResult
from .loader import DEFAULT_DELIMITER


def write_results(
    results: Iterable[GeocodeResult],
    destination: Union[str, Path, IO[str]],
    delimiter: str = DEFAULT_DELIMITER,
) -> int:
    """
    Write ``address<delim>latitude<delim>longitude`` per result.

    Failed lookups keep their (empty) coordinate columns. ``destination`` may
    be a path, which is opened and closed here, or an open text stream.

    Returns:
        Number of lines written.
    """
    if isinstance(destination, (str, Path)):
        with Path(destination).open("w", encoding="utf-8", newline="") as f:
            return _write_rows(results, f, delimiter)
    return _write_rows(results, destination, delimiter)


def _write_rows(results: Iterable[GeocodeResult], stream: IO[str], delimiter: str) -> int:
    writer = csv.writer(
        stream, delimiter=delimiter, quoting=csv.QUOTE_NONE, quotechar=None, lineterminator="\n"
    )
    count = 0
    for result in results:
        writer.writerow([result.address, result.latitude, result.longitude])
        count += 1
    return count
