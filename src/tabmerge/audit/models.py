"""Records written to the audit trail of a merge run.

Each record is serialized with ``dataclasses.asdict``, so field names are
the JSON keys found in run.json and events.jsonl.
"""

from dataclasses import dataclass, field
from typing import Any

from tabmerge.tables.loader import FileLoadResult

__all__ = [
    "ArtifactRecord",
    "ErrorRecord",
    "LogEvent",
    "RunManifest",
    "SourceFileRecord",
    "StageRecord",
]


@dataclass
class SourceFileRecord:
    """One loaded source file.

    ``index`` is the file's 1-based merge position, the same number that
    prefixes its columns in the merged table.
    """

    index: int
    name: str
    format: str
    bytes: int
    sha256: str
    rows_loaded: int
    rows_discarded: int
    columns: list[str]
    mtime: str | None = None

    @classmethod
    def from_load_result(cls, index: int, result: FileLoadResult) -> "SourceFileRecord":
        return cls(
            index=index,
            name=result.filename,
            format=result.format,
            bytes=result.file_size,
            sha256=result.sha256,
            rows_loaded=result.rows_loaded,
            rows_discarded=result.rows_discarded,
            columns=list(result.columns),
            mtime=result.file_mtime,
        )


@dataclass
class StageRecord:
    """Timing and counters of one pipeline stage (stage1_load, stage2_merge, ...)."""

    name: str
    started_at: str
    finished_at: str | None = None
    duration_seconds: float | None = None
    counters: dict[str, int] = field(default_factory=dict)


@dataclass
class ArtifactRecord:
    """A file written by the run: the merged table or the event log."""

    path: str
    sha256: str
    bytes: int
    row_count: int | None = None


@dataclass
class ErrorRecord:
    """Failure recorded in both run.json and events.jsonl.

    ``source`` names the input file when the failure concerns one file.
    """

    timestamp: str
    exception_class: str
    message: str
    stage: str | None = None
    source: str | None = None
    traceback: str | None = None


@dataclass
class RunManifest:
    """Contents of run.json.

    Attributes
    ----------
    command : dict[str, Any]
        ``argv`` and working directory name.
    environment : dict[str, Any]
        Interpreter, platform and package versions.
    inputs : list[SourceFileRecord]
        Source files in merge order.
    merge : dict[str, Any] | None
        Key column, threshold and entity counters once the merge stage ran.
    status : str
        "partial" until the run finishes, then "success", "partial" or
        "failed".
    """

    manifest_version: str
    run_id: str
    created_at: str
    command: dict[str, Any]
    environment: dict[str, Any]
    parameters: dict[str, Any]
    status: str = "partial"
    inputs: list[SourceFileRecord] = field(default_factory=list)
    merge: dict[str, Any] | None = None
    stages: list[StageRecord] = field(default_factory=list)
    outputs: list[ArtifactRecord] = field(default_factory=list)
    errors: list[ErrorRecord] = field(default_factory=list)
    finished_at: str | None = None
    duration_seconds: float | None = None


@dataclass
class LogEvent:
    """One line of events.jsonl.

    ``stage`` defaults to the stage in progress; ``source`` names the input
    file an event is about.
    """

    ts: str
    run_id: str
    level: str
    event: str
    data: dict[str, Any]
    stage: str | None = None
    source: str | None = None
