"""Tests for the structured event logging system."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mathextract.logging import (
    EventLevel,
    EventSink,
    EventType,
    ExtractEvent,
    configure_logging,
    emit,
    emit_info,
    emit_warning,
    get_sink,
    truncate_context,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def log_dir(tmp_path: Path):
    """Point the module-level sink at a temp dir; detach it afterwards."""
    path = tmp_path / "logs"
    configure_logging(path)
    yield path
    configure_logging(None)


@pytest.fixture
def sink(tmp_path: Path) -> EventSink:
    return EventSink(tmp_path / "sink")


# ---------------------------------------------------------------------------
# Event schema
# ---------------------------------------------------------------------------


class TestExtractEvent:
    def test_event_defaults(self) -> None:
        evt = ExtractEvent(
            level=EventLevel.info,
            event_type=EventType.extraction_started,
            message="hello",
        )
        assert evt.schema_version == 1
        assert evt.ts.endswith("Z")
        assert evt.level == "info"
        assert evt.event_type == "extraction_started"
        assert evt.context == {}
        assert evt.error_code is None

    def test_truncate_context(self) -> None:
        out = truncate_context({"source": "x" * 1000, "nested": {"s": "y" * 300}, "n": 5})
        assert out["source"].endswith("...[truncated]")
        assert len(out["source"]) == 256 + len("...[truncated]")
        assert out["nested"]["s"].endswith("...[truncated]")
        assert out["n"] == 5


# ---------------------------------------------------------------------------
# Sink
# ---------------------------------------------------------------------------


class TestEventSink:
    def test_creates_directories(self, sink: EventSink) -> None:
        assert sink.logs_dir.is_dir()
        assert (sink.logs_dir / "extractions").is_dir()

    def test_write_global_and_scoped(self, sink: EventSink) -> None:
        evt = ExtractEvent(
            level=EventLevel.info,
            event_type=EventType.extraction_started,
            context={"extraction_id": "run1"},
        )
        sink.write(evt, extraction_id="run1")

        lines = (sink.logs_dir / "events.ndjson").read_text().splitlines()
        assert len(lines) == 1
        data = json.loads(lines[0])
        assert data["event_type"] == "extraction_started"
        assert data["level"] == "info"
        assert sink.read_extraction_log("run1") == [data]

    def test_unsafe_extraction_id_not_used_as_path(self, sink: EventSink) -> None:
        evt = ExtractEvent(level=EventLevel.info, event_type=EventType.extraction_started)
        sink.write(evt, extraction_id="../x")
        assert list((sink.logs_dir / "extractions").iterdir()) == []
        assert sink.read_extraction_log("../x") == []

    def test_read_global_filters_and_order(self, sink: EventSink) -> None:
        for i, level in enumerate([EventLevel.info, EventLevel.warning, EventLevel.info]):
            sink.write(ExtractEvent(
                level=level,
                event_type=EventType.extraction_started,
                message=f"m{i}",
            ))
        events = sink.read_global()
        assert [e["message"] for e in events] == ["m2", "m1", "m0"]
        assert [e["message"] for e in sink.read_global(level="warning")] == ["m1"]
        assert len(sink.read_global(limit=1)) == 1

    def test_skips_corrupt_lines(self, sink: EventSink) -> None:
        path = sink.logs_dir / "events.ndjson"
        path.write_text('not json\n{"message": "ok"}\n')
        assert sink.read_global() == [{"message": "ok"}]

    def test_tail_bounded_read(self, tmp_path: Path) -> None:
        small = EventSink(tmp_path / "tail", tail_bytes=300)
        for i in range(20):
            small.write(ExtractEvent(
                level=EventLevel.info,
                event_type=EventType.extraction_started,
                message=f"m{i}",
            ))
        events = small.read_global(limit=100)
        assert 0 < len(events) < 20
        assert events[0]["message"] == "m19"


# ---------------------------------------------------------------------------
# Emit helpers
# ---------------------------------------------------------------------------


class TestEmit:
    def test_emit_without_sink_is_noop(self) -> None:
        configure_logging(None)
        assert get_sink() is None
        emit_info(EventType.extraction_started, "nothing happens")

    def test_emit_writes(self, log_dir: Path) -> None:
        emit_warning(EventType.span_parse_failed, "bad", {"source": "(1+"}, error_code="unexpected_token")
        (event,) = get_sink().read_global()
        assert event["level"] == "warning"
        assert event["error_code"] == "unexpected_token"
        assert event["context"] == {"source": "(1+"}

    def test_emit_never_raises(self, log_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def broken(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(get_sink(), "write", broken)
        emit(ExtractEvent(level=EventLevel.info, event_type=EventType.extraction_started))

    def test_emit_truncates_context(self, log_dir: Path) -> None:
        emit_info(EventType.extraction_started, "long", {"source": "1+" * 500})
        (event,) = get_sink().read_global()
        assert event["context"]["source"].endswith("...[truncated]")


# ---------------------------------------------------------------------------
# Driver integration
# ---------------------------------------------------------------------------


class TestExtractionEvents:
    def test_lifecycle_and_failures(self, log_dir: Path) -> None:
        from mathextract import extract_and_evaluate

        extract_and_evaluate("1/0 and (1+ and 2+2")

        sink = get_sink()
        newest = sink.read_global()
        assert newest[0]["event_type"] == "extraction_completed"
        extraction_id = newest[0]["context"]["extraction_id"]

        events = sink.read_extraction_log(extraction_id)
        assert [e["event_type"] for e in events] == [
            "extraction_started",
            "span_eval_failed",
            "span_parse_failed",
            "extraction_completed",
        ]
        assert events[1]["error_code"] == "division_by_zero"
        assert events[1]["context"]["source"] == "1/0"
        assert events[2]["error_code"] == "unexpected_token"
        assert events[3]["context"]["total"] == 3
        assert events[3]["context"]["ok"] == 1
