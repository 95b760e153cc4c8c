"""Audit trail of one merge run: events.jsonl plus run.json."""

import sys
import time
import traceback
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from tabmerge.audit.helpers import describe_environment, new_run_id
from tabmerge.audit.logger import AuditLogger
from tabmerge.audit.manifest import ManifestWriter
from tabmerge.audit.models import ErrorRecord, SourceFileRecord
from tabmerge.merge.models import MergeSummary
from tabmerge.tables.loader import FileLoadResult
from tabmerge.utils import utc_now

__all__ = ["AUDITED_DEPENDENCIES", "RunContext"]

# Distributions whose versions are recorded in run.json
AUDITED_DEPENDENCIES = ("click", "jsonschema", "rapidfuzz")


class RunContext:
    """Owns the event log and manifest of one run directory.

    Used as a context manager, a run finishes as "failed" when an exception
    escapes the block (the exception is recorded first) and as "success"
    otherwise. Once finished, later ``finish`` calls are ignored.

    Attributes
    ----------
    run_id : str
        Run identifier.
    output_dir : Path
        Run directory holding events.jsonl and run.json.
    audit_logger : AuditLogger
        Event log.
    manifest_writer : ManifestWriter
        run.json builder.
    """

    def __init__(
        self,
        run_id: str,
        output_dir: Path,
        audit_logger: AuditLogger,
        manifest_writer: ManifestWriter,
    ) -> None:
        self.run_id = run_id
        self.output_dir = output_dir
        self.audit_logger = audit_logger
        self.manifest_writer = manifest_writer
        self._clock = time.perf_counter()
        self._stage_clocks: dict[str, float] = {}
        self._finished = False

    @classmethod
    def start(
        cls,
        output_dir: Path,
        parameters: dict[str, Any],
        command_argv: list[str] | None = None,
    ) -> "RunContext":
        """Create the run directory and log ``run_started``.

        Parameters
        ----------
        output_dir : Path
            Run directory; created if missing.
        parameters : dict[str, Any]
            Merge configuration, usually ``PipelineConfig.to_dict()``.
        command_argv : list[str] | None, optional
            Command line to record; defaults to sys.argv.
        """
        run_id = new_run_id()
        output_dir.mkdir(parents=True, exist_ok=True)
        argv = list(command_argv or sys.argv)

        audit_logger = AuditLogger(run_id, output_dir / "events.jsonl")
        manifest_writer = ManifestWriter(
            run_id=run_id,
            output_dir=output_dir,
            command={"argv": argv, "cwd": Path.cwd().name or None},
            environment=describe_environment(AUDITED_DEPENDENCIES),
            parameters=parameters,
        )
        audit_logger.event("run_started", {"command": argv, "parameters": parameters})

        return cls(run_id, output_dir, audit_logger, manifest_writer)

    def start_stage(self, name: str, expected_rows: int | None = None) -> None:
        self._stage_clocks[name] = time.perf_counter()
        self.manifest_writer.open_stage(name)
        self.audit_logger.stage_started(name, expected_rows)

    def finish_stage(self, name: str, counters: dict[str, int] | None = None) -> None:
        """Close a stage, recording its duration and counters.

        Raises
        ------
        ValueError
            If the stage was not started.
        """
        started = self._stage_clocks.pop(name, None)
        if started is None:
            raise ValueError(f"Stage not started: {name}")

        record = self.manifest_writer.stage(name)
        record.finished_at = utc_now()
        record.duration_seconds = time.perf_counter() - started
        record.counters.update(counters or {})
        self.audit_logger.stage_finished(record)

    def record_inputs(self, results: Sequence[FileLoadResult]) -> None:
        """Record loaded source files, numbered in merge order."""
        records = [
            SourceFileRecord.from_load_result(index, result)
            for index, result in enumerate(results, start=1)
        ]
        self.manifest_writer.set_inputs(records)
        for record in records:
            self.audit_logger.source_loaded(record)

    def record_summary(self, summary: MergeSummary) -> None:
        self.manifest_writer.set_merge_summary(summary)
        self.audit_logger.merge_summary(summary)

    def record_output(self, path: Path, row_count: int | None = None) -> None:
        artifact = self.manifest_writer.add_artifact(path, row_count=row_count)
        self.audit_logger.artifact_written(artifact)

    def record_error(
        self,
        exception: BaseException,
        stage: str | None = None,
        source: str | None = None,
        include_traceback: bool = False,
    ) -> None:
        """Record a failure in both the manifest and the event log.

        Parameters
        ----------
        exception : BaseException
            The failure.
        stage : str | None, optional
            Stage it happened in.
        source : str | None, optional
            Input file name, for failures tied to one file.
        include_traceback : bool, optional
            Store the formatted traceback, by default False.
        """
        record = ErrorRecord(
            timestamp=utc_now(),
            exception_class=type(exception).__name__,
            message=str(exception),
            stage=stage,
            source=source,
            traceback="".join(traceback.format_exception(exception)) if include_traceback else None,
        )
        self.manifest_writer.add_error(record)
        self.audit_logger.error(record)

    def finish(self, status: str = "success", rows_processed: int | None = None) -> None:
        """Log ``run_finished``, close the event log and write run.json.

        The closed event log is hashed and listed as an output.
        """
        if self._finished:
            return
        self._finished = True

        duration = time.perf_counter() - self._clock
        data: dict[str, Any] = {"status": status, "duration_seconds": duration}
        if rows_processed is not None:
            data["rows_processed"] = rows_processed
        self.audit_logger.event("run_finished", data)
        self.audit_logger.close()

        self.manifest_writer.add_artifact(self.audit_logger.log_path)
        self.manifest_writer.write(status, duration_seconds=duration)

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_val is not None:
            self.record_error(exc_val, include_traceback=True)
            self.finish(status="failed")
        else:
            self.finish(status="success")
