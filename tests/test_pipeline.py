"""
Tests for the load / resolve / write pipeline.
"""

import io

import pytest
import requests

from coordinate_grabber.errors import InputFileError, MalformedLineError
from coordinate_grabber.geocoding import (
    FailureKind,
    GeocodingStrategy,
    GoogleMapsStrategy,
    LookupOutcome,
)
from coordinate_grabber.models import AddressRecord, GeocodeResult, RunSummary
from coordinate_grabber.pipeline import (
    GeocodeResolver,
    format_summary,
    iter_addresses,
    load_addresses,
    report_summary,
    run_batch,
    write_results,
)
from fakes import TEMPLATE, FakeResponse, FakeSession, api_body, ok_response


class ScriptedStrategy(GeocodingStrategy):
    """Returns queued outcomes and records each lookup in a shared event log."""

    def __init__(self, outcomes, events, delay=0.2):
        self.outcomes = list(outcomes)
        self.events = events
        self.delay = delay

    def lookup(self, record):
        self.events.append(("lookup", record.street_address))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get_source_name(self):
        return "scripted"

    def get_rate_limit_delay(self):
        return self.delay


def recording_sleep(events):
    return lambda seconds: events.append(("sleep", seconds))


def records(*addresses):
    return [AddressRecord(a, "Springfield", "IL", i) for i, a in enumerate(addresses, start=1)]


class TestLoader:
    def test_splits_on_tab(self):
        lines = io.StringIO("1 Main St\tSpringfield\tIL\n2 Oak Ave\tChicago\tIL\n")

        loaded = list(iter_addresses(lines))

        assert loaded == [
            AddressRecord("1 Main St", "Springfield", "IL", 1),
            AddressRecord("2 Oak Ave", "Chicago", "IL", 2),
        ]

    def test_extra_columns_ignored(self):
        loaded = list(iter_addresses(io.StringIO("1 Main St\tSpringfield\tIL\t62701\n")))
        assert loaded == [AddressRecord("1 Main St", "Springfield", "IL", 1)]

    def test_quotes_kept_literally(self):
        loaded = list(iter_addresses(io.StringIO('"1 Main St"\tSpringfield\tIL\n')))
        assert loaded[0].street_address == '"1 Main St"'

    def test_field_content_not_validated(self):
        loaded = list(iter_addresses(io.StringIO("\t\tIL\n")))
        assert loaded == [AddressRecord("", "", "IL", 1)]

    def test_blank_lines_skipped(self):
        messages = []
        lines = io.StringIO("1 Main St\tSpringfield\tIL\n\n   \n2 Oak Ave\tChicago\tIL\n")

        loaded = list(iter_addresses(lines, logger=messages.append))

        assert [r.street_address for r in loaded] == ["1 Main St", "2 Oak Ave"]
        assert loaded[1].line_number == 4
        assert messages == ["Line 2: blank, skipped", "Line 3: blank, skipped"]

    def test_three_blank_fields_kept_as_record(self):
        """Field content is not validated, so whitespace-only columns still form a record."""
        lines = io.StringIO("1 Main St\tSpringfield\tIL\n \t \t \n")

        loaded = list(iter_addresses(lines))

        assert len(loaded) == 2
        assert loaded[1] == AddressRecord(" ", " ", " ", 2)

    def test_oversized_line_raises_input_error(self):
        lines = io.StringIO("x" * 200000 + "\tSpringfield\tIL\n")

        with pytest.raises(InputFileError) as exc_info:
            list(iter_addresses(lines))

        assert "Line 1" in str(exc_info.value)

    def test_undecodable_file_raises_input_error(self, tmp_path):
        path = tmp_path / "in.txt"
        path.write_bytes("1 Peña St\tSpringfield\tIL\n".encode("latin-1"))

        with pytest.raises(InputFileError) as exc_info:
            load_addresses(path)

        assert "--encoding" in str(exc_info.value)

    def test_load_addresses_with_encoding(self, tmp_path):
        path = tmp_path / "in.txt"
        path.write_bytes("1 Peña St\tSpringfield\tIL\n".encode("latin-1"))

        assert load_addresses(path, encoding="latin-1")[0].street_address == "1 Peña St"

    def test_short_line_fails_fast(self):
        lines = io.StringIO("1 Main St\tSpringfield\tIL\n2 Oak Ave\tChicago\n")

        with pytest.raises(MalformedLineError) as exc_info:
            list(iter_addresses(lines))

        assert exc_info.value.line_number == 2
        assert exc_info.value.field_count == 2

    def test_custom_delimiter(self):
        loaded = list(iter_addresses(io.StringIO("1 Main St|Springfield|IL\n"), delimiter="|"))
        assert loaded == [AddressRecord("1 Main St", "Springfield", "IL", 1)]

    def test_load_addresses_handles_crlf_and_bom(self, tmp_path):
        path = tmp_path / "in.txt"
        path.write_bytes("\ufeff1 Main St\tSpringfield\tIL\r\n".encode("utf-8"))

        assert load_addresses(path) == [AddressRecord("1 Main St", "Springfield", "IL", 1)]

    def test_missing_file_propagates(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_addresses(tmp_path / "missing.txt")


class TestWriter:
    def test_writes_resolved_and_failed_rows(self):
        out = io.StringIO()

        written = write_results(
            [GeocodeResult.resolved("1 Main St", "39.1", "-89.6"), GeocodeResult.failed("2 Oak Ave")],
            out,
        )

        assert written == 2
        assert out.getvalue() == "1 Main St\t39.1\t-89.6\n2 Oak Ave\t\t\n"

    def test_address_with_quotes_written_verbatim(self):
        out = io.StringIO()
        write_results([GeocodeResult.failed('Unit "B", 5 Elm St')], out)
        assert out.getvalue() == 'Unit "B", 5 Elm St\t\t\n'

    def test_writes_to_path(self, tmp_path):
        path = tmp_path / "out.txt"
        write_results([GeocodeResult.failed("1 Main St")], path, delimiter=",")
        assert path.read_text(encoding="utf-8") == "1 Main St,,\n"


class TestResolver:
    def test_one_result_per_record_in_order(self):
        events = []
        strategy = ScriptedStrategy(
            [
                LookupOutcome.success("1.0", "2.0"),
                LookupOutcome.failed(FailureKind.NO_MATCH),
                LookupOutcome.success("3.0", "4.0"),
            ],
            events,
        )

        results, summary = GeocodeResolver(strategy, sleep=recording_sleep(events)).resolve(
            records("A", "B", "C")
        )

        assert results == [
            GeocodeResult("A", "1.0", "2.0"),
            GeocodeResult("B", "", ""),
            GeocodeResult("C", "3.0", "4.0"),
        ]
        assert summary.total_records == 3
        assert summary.failure_count == 1
        assert dict(summary.failures_by_kind) == {"no_match": 1}

    def test_sleep_follows_every_lookup(self):
        """The rate-limit pause runs once per record, success or failure."""
        events = []
        strategy = ScriptedStrategy(
            [
                LookupOutcome.failed(FailureKind.TRANSPORT),
                LookupOutcome.success("1", "2"),
                LookupOutcome.failed(FailureKind.BAD_STATUS, status="REQUEST_DENIED"),
            ],
            events,
            delay=0.2,
        )

        GeocodeResolver(strategy, sleep=recording_sleep(events)).resolve(records("A", "B", "C"))

        assert events == [
            ("lookup", "A"),
            ("sleep", 0.2),
            ("lookup", "B"),
            ("sleep", 0.2),
            ("lookup", "C"),
            ("sleep", 0.2),
        ]

    def test_strategy_exception_becomes_failed_record(self):
        """A lookup that raises is counted as a failure and the run continues."""
        events = []
        messages = []
        strategy = ScriptedStrategy(
            [RecursionError("maximum recursion depth exceeded"), LookupOutcome.success("1", "2")],
            events,
        )

        results, summary = GeocodeResolver(
            strategy, sleep=recording_sleep(events), logger=messages.append
        ).resolve(records("A", "B"))

        assert results == [GeocodeResult("A", "", ""), GeocodeResult("B", "1", "2")]
        assert summary.failure_count == 1
        assert dict(summary.failures_by_kind) == {"unexpected": 1}
        assert events == [("lookup", "A"), ("sleep", 0.2), ("lookup", "B"), ("sleep", 0.2)]
        assert messages[0] == "[1/2] A -> lookup raised RecursionError: maximum recursion depth exceeded"
        assert messages[1] == "[1/2] A -> failed (unexpected)"

    def test_progress_lines_logged(self):
        messages = []
        strategy = ScriptedStrategy(
            [
                LookupOutcome.success("39.1", "-89.6"),
                LookupOutcome.failed(FailureKind.BAD_STATUS, status="OVER_QUERY_LIMIT"),
            ],
            [],
        )

        GeocodeResolver(strategy, sleep=lambda s: None, logger=messages.append).resolve(
            records("1 Main St", "2 Oak Ave")
        )

        assert messages == [
            "[1/2] 1 Main St -> 39.1,-89.6",
            "[2/2] 2 Oak Ave -> failed (bad_status) [OVER_QUERY_LIMIT]",
        ]

    def test_empty_input(self):
        results, summary = GeocodeResolver(ScriptedStrategy([], []), sleep=lambda s: None).resolve([])
        assert results == []
        assert (summary.total_records, summary.failure_count) == (0, 0)


class TestSummary:
    def test_format_summary(self):
        summary = RunSummary(total_records=5)
        summary.record_failure("transport")
        summary.record_failure("no_match")

        assert format_summary(summary) == [
            "Total Records: 5",
            "Total Failures: 2",
            "  no_match: 1",
            "  transport: 1",
        ]

    def test_report_summary_uses_logger(self):
        lines = []
        report_summary(RunSummary(total_records=1), lines.append)
        assert lines == ["Total Records: 1", "Total Failures: 0"]


class TestRunBatch:
    """End-to-end runs against a fake geocoding service."""

    def _run(self, tmp_path, text, session, name="out.txt"):
        in_path = tmp_path / "in.txt"
        in_path.write_text(text, encoding="utf-8")
        out_path = tmp_path / name
        strategy = GoogleMapsStrategy(TEMPLATE, session=session)
        summary = run_batch(in_path, out_path, strategy, sleep=lambda s: None)
        return out_path.read_text(encoding="utf-8"), summary

    def test_resolved_address(self, tmp_path):
        session = FakeSession(ok_response("1 Main St, Springfield, IL, USA", 39.1, -89.6))

        output, summary = self._run(tmp_path, "1 Main St\tSpringfield\tIL\n", session)

        assert output == "1 Main St\t39.1\t-89.6\n"
        assert (summary.total_records, summary.failure_count) == (1, 0)

    def test_zero_results(self, tmp_path):
        session = FakeSession(FakeResponse(200, api_body("ZERO_RESULTS", [])))

        output, summary = self._run(tmp_path, "1 Main St\tSpringfield\tIL\n", session)

        assert output == "1 Main St\t\t\n"
        assert summary.failure_count == 1

    def test_wrong_city(self, tmp_path):
        session = FakeSession(ok_response("2 Oak Ave, Chicago, IL, USA", 41.8, -87.6))

        output, summary = self._run(tmp_path, "2 Oak Ave\tSpringfield\tIL\n", session)

        assert output == "2 Oak Ave\t\t\n"
        assert summary.failure_count == 1

    def test_connection_error_does_not_stop_run(self, tmp_path):
        session = FakeSession(
            requests.ConnectionError("connection reset"),
            ok_response("2 Oak Ave, Springfield, IL, USA", 39.2, -89.7),
        )

        output, summary = self._run(
            tmp_path, "1 Main St\tSpringfield\tIL\n2 Oak Ave\tSpringfield\tIL\n", session
        )

        assert output == "1 Main St\t\t\n2 Oak Ave\t39.2\t-89.7\n"
        assert (summary.total_records, summary.failure_count) == (2, 1)

    def test_deeply_nested_body_does_not_stop_run(self, tmp_path):
        session = FakeSession(
            ok_response("1 Main St, Springfield, IL, USA", 39.1, -89.6),
            FakeResponse(200, "[" * 100000),
        )

        output, summary = self._run(
            tmp_path, "1 Main St\tSpringfield\tIL\n2 Oak Ave\tSpringfield\tIL\n", session
        )

        assert output == "1 Main St\t39.1\t-89.6\n2 Oak Ave\t\t\n"
        assert dict(summary.failures_by_kind) == {"malformed_body": 1}

    def test_rerun_is_byte_identical(self, tmp_path):
        text = "1 Main St\tSpringfield\tIL\n2 Oak Ave\tSpringfield\tIL\n"

        def replies():
            return [
                ok_response("1 Main St, Springfield, IL, USA", 39.1, -89.6),
                FakeResponse(200, api_body("ZERO_RESULTS")),
            ]

        first, _ = self._run(tmp_path, text, FakeSession(*replies()), name="a.txt")
        second, _ = self._run(tmp_path, text, FakeSession(*replies()), name="b.txt")

        assert (tmp_path / "a.txt").read_bytes() == (tmp_path / "b.txt").read_bytes()
        assert first == second

    def test_malformed_line_aborts_before_any_request(self, tmp_path):
        session = FakeSession()

        with pytest.raises(MalformedLineError):
            self._run(tmp_path, "1 Main St\tSpringfield\tIL\nbroken line\n", session)

        assert session.calls == []
        assert not (tmp_path / "out.txt").exists()
