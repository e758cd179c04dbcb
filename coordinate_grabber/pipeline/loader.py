"""Parse delimited address files into AddressRecords."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Union

from ..errors import InputFileError, MalformedLineError
from ..models import AddressRecord

DEFAULT_DELIMITER = "\t"
DEFAULT_ENCODING = "utf-8-sig"


def iter_addresses(
    lines: Iterable[str],
    delimiter: str = DEFAULT_DELIMITER,
    logger: Optional[Callable[[str], None]] = None,
) -> Iterator[AddressRecord]:
    """
    Yield one AddressRecord per non-empty line.

    Lines are split on ``delimiter`` only; quote characters are kept as-is.
    Columns after the third are ignored. Only empty or whitespace-only lines
    are skipped; a line with three blank fields is still a record.

    Raises:
        MalformedLineError: On the first non-empty line with fewer than three fields.
        InputFileError: If the csv module cannot split a line (e.g. field too large).
    """
    log = logger or (lambda msg: None)
    reader = csv.reader(lines, delimiter=delimiter, quoting=csv.QUOTE_NONE, quotechar=None)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise InputFileError(f"Line {reader.line_num}: {e}") from e
        if _is_blank(row):
            log(f"Line {reader.line_num}: blank, skipped")
            continue
        if len(row) < 3:
            raise MalformedLineError(reader.line_num, len(row), delimiter)
        yield AddressRecord(
            street_address=row[0],
            city=row[1],
            state=row[2],
            line_number=reader.line_num,
        )


def _is_blank(row: List[str]) -> bool:
    # Whitespace between delimiters still counts as fields
    return len(row) <= 1 and not "".join(row).strip()


def load_addresses(
    path: Union[str, Path],
    delimiter: str = DEFAULT_DELIMITER,
    logger: Optional[Callable[[str], None]] = None,
    encoding: str = DEFAULT_ENCODING,
) -> List[AddressRecord]:
    """
    Read every record from ``path``.

    Errors opening the file propagate as OSError; bytes that are not valid in
    ``encoding`` raise InputFileError.
    """
    with Path(path).open("r", encoding=encoding, newline="") as f:
        try:
            return list(iter_addresses(f, delimiter=delimiter, logger=logger))
        except UnicodeDecodeError as e:
            raise InputFileError(
                f"{path} is not valid {e.encoding} text ({e.reason} at byte {e.start}); "
                "set the input encoding, e.g. --encoding latin-1"
            ) from e
