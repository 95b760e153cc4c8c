"""Append-only JSONL event log for a merge run."""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from tabmerge.audit.models import (
    ArtifactRecord,
    ErrorRecord,
    LogEvent,
    SourceFileRecord,
    StageRecord,
)
from tabmerge.merge.models import MergeSummary
from tabmerge.utils import utc_now

__all__ = ["AuditLogger"]


class AuditLogger:
    """Writes one JSON object per line to events.jsonl.

    Lines are flushed as they are written, so the log is complete up to
    the last event even if the process dies. Events that name no stage are
    attributed to the stage most recently started.

    Attributes
    ----------
    run_id : str
        Run identifier stamped on every event.
    log_path : Path
        Path to events.jsonl.
    current_stage : str | None
        Stage in progress.
    """

    def __init__(self, run_id: str, log_path: Path) -> None:
        self.run_id = run_id
        self.log_path = log_path
        self.current_stage: str | None = None

        log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = log_path.open("a", encoding="utf-8")

    def close(self) -> None:
        """Close the log; further calls are no-ops."""
        if not self._file.closed:
            self._file.close()

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
        source: str | None = None,
    ) -> None:
        """Append one event.

        Parameters
        ----------
        event_type : str
            Event name, e.g. "stage_started".
        data : dict[str, Any] | None, optional
            Event payload.
        level : str, optional
            "DEBUG", "INFO", "WARN" or "ERROR".
        stage : str | None, optional
            Stage name; defaults to the current stage.
        source : str | None, optional
            Input file name the event is about.
        """
        record = LogEvent(
            ts=utc_now(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data or {},
            stage=stage or self.current_stage,
            source=source,
        )
        self._file.write(json.dumps(asdict(record), ensure_ascii=False, separators=(",", ":")))
        self._file.write("\n")
        self._file.flush()

    def stage_started(self, stage: str, expected_rows: int | None = None) -> None:
        """Log the start of a stage and make it the current stage."""
        self.current_stage = stage
        data = {} if expected_rows is None else {"expected_rows": expected_rows}
        self.event("stage_started", data, stage=stage)

    def stage_finished(self, record: StageRecord) -> None:
        data: dict[str, Any] = {"duration_seconds": record.duration_seconds}
        if record.counters:
            data["counters"] = dict(record.counters)
        self.event("stage_finished", data, stage=record.name)

    def source_loaded(self, record: SourceFileRecord) -> None:
        """Log a loaded source file, plus a warning if blank rows were dropped."""
        self.event(
            "source_loaded",
            {"index": record.index, "rows_loaded": record.rows_loaded, "columns": record.columns},
            source=record.name,
        )
        if record.rows_discarded:
            self.event(
                "rows_discarded",
                {
                    "index": record.index,
                    "count": record.rows_discarded,
                    "reason_code": "blank_row",
                },
                level="WARN",
                source=record.name,
            )

    def merge_summary(self, summary: MergeSummary) -> None:
        """Log per-source match counts and entity totals of a finished merge."""
        self.event("merge_summary", summary.to_dict())

    def artifact_written(self, artifact: ArtifactRecord) -> None:
        self.event("artifact_written", asdict(artifact))

    def error(self, record: ErrorRecord) -> None:
        data = {"exception_class": record.exception_class, "message": record.message}
        if record.traceback is not None:
            data["traceback"] = record.traceback
        self.event("error", data, level="ERROR", stage=record.stage, source=record.source)
