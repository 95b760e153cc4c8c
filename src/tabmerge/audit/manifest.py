"""run.json builder for a merge run."""

import json
import os
from collections.abc import Sequence
from dataclasses import asdict
from pathlib import Path
from typing import Any

from tabmerge.audit.models import (
    ArtifactRecord,
    ErrorRecord,
    RunManifest,
    SourceFileRecord,
    StageRecord,
)
from tabmerge.merge.models import MergeSummary
from tabmerge.utils import file_sha256, utc_now

__all__ = ["MANIFEST_VERSION", "ManifestWriter"]

MANIFEST_VERSION = "1.0.0"


class ManifestWriter:
    """Accumulates a RunManifest and writes it to ``<output_dir>/run.json``.

    Attributes
    ----------
    manifest : RunManifest
        Manifest being built.
    output_dir : Path
        Run directory.
    path : Path
        Destination of run.json.
    """

    def __init__(
        self,
        run_id: str,
        output_dir: Path,
        command: dict[str, Any],
        environment: dict[str, Any],
        parameters: dict[str, Any],
    ) -> None:
        self.output_dir = output_dir
        self.path = output_dir / "run.json"
        self.manifest = RunManifest(
            manifest_version=MANIFEST_VERSION,
            run_id=run_id,
            created_at=utc_now(),
            command=command,
            environment=environment,
            parameters=parameters,
        )
        self._stages: dict[str, StageRecord] = {}

    def set_inputs(self, records: Sequence[SourceFileRecord]) -> None:
        self.manifest.inputs = list(records)

    def set_merge_summary(self, summary: MergeSummary) -> None:
        """Store the merge totals; per-source counts are already in ``inputs``."""
        self.manifest.merge = {
            "key_column": summary.key_column,
            "similarity_threshold": summary.similarity_threshold,
            "rows_in": summary.rows_in_total,
            "entities_out": summary.entities_out,
            "entities_multi_source": summary.entities_multi_source,
            "keyless_rows": summary.keyless_rows,
        }

    def open_stage(self, name: str) -> StageRecord:
        record = StageRecord(name=name, started_at=utc_now())
        self.manifest.stages.append(record)
        self._stages[name] = record
        return record

    def stage(self, name: str) -> StageRecord:
        """Look up an opened stage.

        Raises
        ------
        ValueError
            If no stage with that name was opened.
        """
        try:
            return self._stages[name]
        except KeyError:
            raise ValueError(f"Stage not found: {name}") from None

    def add_artifact(self, path: Path, row_count: int | None = None) -> ArtifactRecord:
        """Hash a written file and list it under ``outputs``.

        Paths inside the run directory are stored relative to it.
        """
        display = path
        if path.is_relative_to(self.output_dir):
            display = path.relative_to(self.output_dir)
        artifact = ArtifactRecord(
            path=str(display),
            sha256=file_sha256(path),
            bytes=path.stat().st_size,
            row_count=row_count,
        )
        self.manifest.outputs.append(artifact)
        return artifact

    def add_error(self, record: ErrorRecord) -> None:
        self.manifest.errors.append(record)

    def write(self, status: str, duration_seconds: float | None = None) -> None:
        """Set the final status and replace run.json atomically."""
        self.manifest.status = status
        self.manifest.finished_at = utc_now()
        self.manifest.duration_seconds = duration_seconds

        temp_path = self.path.with_name(self.path.name + ".tmp")
        with temp_path.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(self.path)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self.manifest)
