"""Find expressions in free text and evaluate each one independently.

Each candidate span runs through tokenize -> parse -> evaluate on its own.
A failure in one span is recorded on that span's record and never stops
the spans after it.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from mathextract.expressions import (
    EvaluationResult,
    MathExtractError,
    ParsedExpression,
    ParseError,
    Span,
    evaluate_expression,
    parse,
    scan_candidates,
    tokenize,
)
from mathextract.logging.events import (
    EventType,
    emit_info,
    emit_warning,
)


@dataclass(frozen=True)
class ExtractionRecord:
    """Outcome for one candidate span.

    Exactly one of ``parse_error`` and ``result`` is set.
    """

    span: Span
    source: str
    parsed: ParsedExpression | None = None
    parse_error: ParseError | None = None
    result: EvaluationResult | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None and self.result.ok

    @property
    def value(self) -> float | None:
        return self.result.value if self.result is not None else None

    @property
    def error(self) -> MathExtractError | None:
        if self.parse_error is not None:
            return self.parse_error
        return self.result.error if self.result is not None else None

    @property
    def status(self) -> str:
        if self.parse_error is not None:
            return "parse_error"
        return "ok" if self.ok else "eval_error"

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form for JSON output."""
        out: dict[str, Any] = {
            "start": self.span.start,
            "end": self.span.end,
            "source": self.source,
            "status": self.status,
            "value": self.value,
        }
        err = self.error
        if err is not None:
            out["error"] = {
                "code": err.code,
                "message": err.message,
                "position": err.position,
            }
        return out


def extract_and_evaluate(text: str, *, max_workers: int | None = None) -> list[ExtractionRecord]:
    """Extract every candidate expression in *text* and evaluate it.

    Args:
        text: Arbitrary text.
        max_workers: Evaluate spans on this many threads.  ``None`` or 1
            runs sequentially.

    Returns:
        One record per candidate span, in left-to-right order.  Empty if
        the text contains no candidates.
    """
    extraction_id = uuid4().hex
    emit_info(
        EventType.extraction_started,
        f"Extraction started on {len(text)} character(s)",
        {"extraction_id": extraction_id},
    )

    spans = list(scan_candidates(text))
    if max_workers is None or max_workers <= 1 or len(spans) <= 1:
        records = [_process_span(text, span, extraction_id) for span in spans]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            records = list(executor.map(
                lambda span: _process_span(text, span, extraction_id), spans
            ))

    ok_count = sum(1 for r in records if r.ok)
    failed = len(records) - ok_count
    emit_info(
        EventType.extraction_completed,
        f"Extraction completed: {ok_count} ok, {failed} failed",
        {"extraction_id": extraction_id, "total": len(records), "ok": ok_count, "failed": failed},
    )
    return records


def process_span(text: str, span: Span) -> ExtractionRecord:
    """Run the tokenize -> parse -> evaluate pipeline on one span of *text*."""
    return _process_span(text, span, None)


def _process_span(text: str, span: Span, extraction_id: str | None) -> ExtractionRecord:
    source = span.text_of(text)
    try:
        tokens = tokenize(source, offset=span.start)
        parsed = parse(tokens, span)
    except ParseError as exc:
        if extraction_id is not None:
            _emit_span_failure(EventType.span_parse_failed, extraction_id, span, source, exc)
        return ExtractionRecord(span=span, source=source, parse_error=exc)

    result = evaluate_expression(parsed)
    if result.error is not None and extraction_id is not None:
        _emit_span_failure(EventType.span_eval_failed, extraction_id, span, source, result.error)
    return ExtractionRecord(span=span, source=source, parsed=parsed, result=result)


def _emit_span_failure(
    event_type: EventType,
    extraction_id: str,
    span: Span,
    source: str,
    exc: MathExtractError,
) -> None:
    emit_warning(
        event_type,
        str(exc),
        {
            "extraction_id": extraction_id,
            "span_start": span.start,
            "span_end": span.end,
            "source": source,
        },
        error_code=exc.code,
    )
