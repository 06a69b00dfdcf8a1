"""Tests for the extraction driver."""

from __future__ import annotations

import json

import pytest

from mathextract import extract_and_evaluate
from mathextract.expressions import (
    ArityMismatchError,
    DivisionByZeroError,
    DomainError,
    Span,
    UnexpectedTokenError,
    UnknownFunctionError,
)
from mathextract.extract import process_span


# ────────────────────────────────────────────────────────────────
# Ordering and values
# ────────────────────────────────────────────────────────────────


class TestExtractAndEvaluate:
    def test_two_expressions(self) -> None:
        records = extract_and_evaluate("value is (1+2) and also 3*4 done")
        assert [r.source for r in records] == ["(1+2)", "3*4"]
        assert [r.value for r in records] == [3.0, 12.0]
        assert all(r.ok for r in records)

    def test_spans_are_absolute(self) -> None:
        records = extract_and_evaluate("value is (1+2) and also 3*4 done")
        assert [r.span for r in records] == [Span(9, 14), Span(24, 27)]

    def test_no_candidates(self) -> None:
        assert extract_and_evaluate("just words here") == []
        assert extract_and_evaluate("") == []

    def test_malformed_then_valid(self) -> None:
        records = extract_and_evaluate("first (1+ then 2+2")
        assert len(records) == 2
        bad, good = records
        assert isinstance(bad.parse_error, UnexpectedTokenError)
        assert bad.result is None
        assert bad.parsed is None
        assert bad.status == "parse_error"
        assert good.ok
        assert good.value == 4.0

    def test_evaluation_failure_does_not_stop_later_spans(self) -> None:
        records = extract_and_evaluate("a 5/0 b sqrt(-1) c 2^10")
        assert [r.status for r in records] == ["eval_error", "eval_error", "ok"]
        assert isinstance(records[0].error, DivisionByZeroError)
        assert isinstance(records[1].error, DomainError)
        assert records[2].value == 1024.0

    def test_evaluation_failure_keeps_parsed_tree(self) -> None:
        (record,) = extract_and_evaluate("try 1/0 now")
        assert record.parsed is not None
        assert record.parse_error is None
        assert record.result is not None
        assert not record.result.ok

    def test_unknown_function_position_is_absolute(self) -> None:
        (record,) = extract_and_evaluate("see foo(1) here")
        assert isinstance(record.error, UnknownFunctionError)
        assert record.error.position == 4

    def test_function_calls_in_prose(self) -> None:
        records = extract_and_evaluate("We know sqrt(16) is 4, and log(8, 2) is 3.")
        assert [r.source for r in records] == ["sqrt(16)", "4", "log(8, 2)", "3"]
        assert [r.value for r in records] == pytest.approx([4.0, 4.0, 3.0, 3.0])

    def test_long_sum_in_prose(self) -> None:
        (record,) = extract_and_evaluate("total " + "+".join(["1"] * 300) + " done")
        assert record.ok
        assert record.value == 300.0

    def test_non_breaking_space_inside_expression(self) -> None:
        (record,) = extract_and_evaluate("a 1 +\xa02 b")
        assert record.source == "1 +\xa02"
        assert record.value == 3.0

    def test_empty_call_in_prose(self) -> None:
        (record,) = extract_and_evaluate("compute sin() now")
        assert isinstance(record.error, ArityMismatchError)
        assert record.error.got == 0
        assert record.status == "parse_error"

    def test_trailing_dash_in_prose(self) -> None:
        (record,) = extract_and_evaluate("5 - well")
        assert record.source == "5 -"
        assert isinstance(record.error, UnexpectedTokenError)
        assert record.error.found == "end of input"

    def test_multiline_text(self) -> None:
        text = "line one: 1+1\nline two: 2*(3+4)\n"
        assert [r.value for r in extract_and_evaluate(text)] == [2.0, 14.0]


# ────────────────────────────────────────────────────────────────
# Parallel evaluation
# ────────────────────────────────────────────────────────────────


class TestParallel:
    def test_same_order_as_sequential(self) -> None:
        text = " ; ".join(f"{i}*{i} + (1/{i % 3})" for i in range(40))
        sequential = extract_and_evaluate(text)
        parallel = extract_and_evaluate(text, max_workers=4)
        assert [r.to_dict() for r in parallel] == [r.to_dict() for r in sequential]
        assert len(parallel) == 40

    def test_single_worker(self) -> None:
        records = extract_and_evaluate("1+1 and 2+2", max_workers=1)
        assert [r.value for r in records] == [2.0, 4.0]


# ────────────────────────────────────────────────────────────────
# Records
# ────────────────────────────────────────────────────────────────


class TestRecords:
    def test_process_span(self) -> None:
        text = "xx 6/3 yy"
        record = process_span(text, Span(3, 6))
        assert record.source == "6/3"
        assert record.value == 2.0

    def test_to_dict_ok(self) -> None:
        (record,) = extract_and_evaluate("is 2*3?")
        assert record.to_dict() == {
            "start": 3,
            "end": 6,
            "source": "2*3",
            "status": "ok",
            "value": 6.0,
        }

    def test_to_dict_error(self) -> None:
        (record,) = extract_and_evaluate("bad: sin(1, 2)")
        data = record.to_dict()
        assert data["status"] == "parse_error"
        assert data["value"] is None
        assert data["error"]["code"] == "arity_mismatch"
        assert data["error"]["position"] == 5
        json.dumps(data)

    def test_records_are_immutable(self) -> None:
        (record,) = extract_and_evaluate("1+1")
        with pytest.raises(AttributeError):
            record.source = "2+2"  # type: ignore[misc]
