"""Structured logging for machine-parseable diagnostics."""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any, Iterable, TextIO

import structlog
from structlog.processors import JSONRenderer
from structlog.typing import Processor

_configured = False
_logger: Any = None
_file_handle: TextIO | None = None


def configure_run_logging(log_dir: str) -> Path:
    """One-time setup. Writes JSON lines to {log_dir}/events.jsonl."""
    global _configured, _logger, _file_handle
    events_path = Path(log_dir) / "events.jsonl"
    if _configured:
        return events_path
    events_path.parent.mkdir(parents=True, exist_ok=True)
    _file_handle = open(events_path, "a", encoding="utf-8")
    file_handle = _file_handle

    def _file_logger_factory(*args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file_handle)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        JSONRenderer(),
    ]
    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=_file_logger_factory,
        cache_logger_on_first_use=False,
    )
    _configured = True
    _logger = structlog.get_logger()
    return events_path


def reset_run_logging() -> None:
    """Close the events file and disable event output."""
    global _configured, _logger, _file_handle
    if _file_handle is not None:
        _file_handle.close()
    _file_handle = None
    _logger = None
    _configured = False
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def bind_run(run_id: str, command: str) -> None:
    """Bind run context so every event includes run_id and command."""
    structlog.contextvars.bind_contextvars(run_id=run_id, command=command)


def log_engine_run(engine: str, action: str, **summary: Any) -> None:
    """Log engine start/done (action: start|done)."""
    if _logger is not None:
        _logger.info("engine_run", engine=engine, action=action, **summary)


def log_citation_repair(
    added_cites_in: int,
    added_cites_out: int,
    edges: list[tuple[str, str]] | None = None,
) -> None:
    """Log the asymmetric citation edges that were repaired before counting."""
    payload: dict[str, Any] = {"added_cites_in": added_cites_in, "added_cites_out": added_cites_out}
    if edges:
        payload["edges"] = [f"{citing} -> {cited}" for citing, cited in edges[:50]]
        if len(edges) > 50:
            payload["edges_truncated"] = len(edges) - 50
    if _logger is not None:
        _logger.info("citation_repair", **payload)


def log_metadata_fetch(
    doi: str,
    status: str,
    *,
    attempts: int | None = None,
    background: bool = False,
    error: str | None = None,
) -> None:
    """Log a candidate metadata fetch outcome."""
    payload: dict[str, Any] = {"doi": doi, "status": status, "background": background}
    if attempts is not None:
        payload["attempts"] = attempts
    if error is not None:
        payload["error"] = error
    if _logger is not None:
        _logger.info("metadata_fetch", **payload)


def load_events_from_jsonl(path: str) -> list[dict[str, Any]]:
    """Read an events.jsonl file; lines that fail to parse are skipped."""
    events: list[dict[str, Any]] = []
    p = Path(path)
    if not p.exists():
        return events
    with p.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(entry, dict):
                events.append(entry)
    return events


def summarize_events(events: Iterable[dict[str, Any]]) -> list[tuple[str, str, str, int]]:
    """Count events per (run_id, event, detail), sorted.

    The detail is the engine and action for engine_run, the fetch status for
    metadata_fetch (marked when it came from the background prefetch) and
    empty for other events.
    """
    counts: Counter[tuple[str, str, str]] = Counter()
    for entry in events:
        name = str(entry.get("event", "unknown"))
        if name == "engine_run":
            detail = f"{entry.get('engine', '?')} {entry.get('action', '?')}"
        elif name == "metadata_fetch":
            detail = str(entry.get("status", "?"))
            if entry.get("background"):
                detail += " (background)"
        else:
            detail = ""
        counts[(str(entry.get("run_id", "-")), name, detail)] += 1
    return [(run_id, name, detail, count) for (run_id, name, detail), count in sorted(counts.items())]
