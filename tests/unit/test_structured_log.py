"""
Unit tests for structured event logging.
"""

from refgraph.utils import structured_log
from refgraph.utils.structured_log import (
    bind_run,
    configure_run_logging,
    load_events_from_jsonl,
    log_citation_repair,
    log_engine_run,
    log_metadata_fetch,
    summarize_events,
)


class TestStructuredLog:
    """Test the JSON-lines event log."""

    def test_events_written_as_json_lines(self, tmp_path, run_logging_reset):
        events_path = configure_run_logging(str(tmp_path))
        bind_run("run-1", "suggest")

        log_engine_run("suggestions", "done", total=3)
        log_citation_repair(1, 0, [("10.1/a", "10.1/b")])
        log_metadata_fetch("10.1/d", "failed", attempts=2, error="ConnectionError: down")
        structured_log._file_handle.flush()

        events = load_events_from_jsonl(str(events_path))
        assert [event["event"] for event in events] == ["engine_run", "citation_repair", "metadata_fetch"]
        assert events[0]["total"] == 3
        assert events[0]["run_id"] == "run-1"
        assert events[1]["edges"] == ["10.1/a -> 10.1/b"]
        assert events[2]["attempts"] == 2
        assert events[2]["background"] is False

    def test_helpers_are_noops_before_configuration(self, tmp_path):
        structured_log.reset_run_logging()

        log_engine_run("authors", "done", authors=0)

        assert not (tmp_path / "events.jsonl").exists()

    def test_load_skips_malformed_lines(self, tmp_path):
        path = tmp_path / "events.jsonl"
        path.write_text('{"event": "engine_run"}\nnot json\n\n[1, 2]\n', encoding="utf-8")

        assert load_events_from_jsonl(str(path)) == [{"event": "engine_run"}]

    def test_load_missing_file(self, tmp_path):
        assert load_events_from_jsonl(str(tmp_path / "missing.jsonl")) == []


class TestSummarizeEvents:
    def test_counts_per_run_event_and_detail(self):
        events = [
            {"event": "engine_run", "engine": "suggestions", "action": "start", "run_id": "r1"},
            {"event": "engine_run", "engine": "suggestions", "action": "done", "run_id": "r1"},
            {"event": "metadata_fetch", "status": "success", "background": False, "run_id": "r1"},
            {"event": "metadata_fetch", "status": "success", "background": False, "run_id": "r1"},
            {"event": "metadata_fetch", "status": "failed", "background": True, "run_id": "r1"},
            {"event": "citation_repair", "added_cites_in": 2, "run_id": "r2"},
            {"status": "orphan"},
        ]

        assert summarize_events(events) == [
            ("-", "unknown", "", 1),
            ("r1", "engine_run", "suggestions done", 1),
            ("r1", "engine_run", "suggestions start", 1),
            ("r1", "metadata_fetch", "failed (background)", 1),
            ("r1", "metadata_fetch", "success", 2),
            ("r2", "citation_repair", "", 1),
        ]

    def test_empty(self):
        assert summarize_events([]) == []
