"""Load, resolve and write stages of a batch geocoding run."""

from .loader import iter_addresses, load_addresses
from .resolver import GeocodeResolver
from .runner import run_batch
from .summary import format_summary, report_summary
from .writer import write_results

__all__ = [
    "GeocodeResolver",
    "format_summary",
    "iter_addresses",
    "load_addresses",
    "report_summary",
    "run_batch",
    "write_results",
]
