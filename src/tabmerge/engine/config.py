"""Pipeline configuration and result dataclasses."""

import json
from dataclasses import asdict, dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema

from tabmerge.merge.engine import DEFAULT_SIMILARITY_THRESHOLD
from tabmerge.merge.models import MergedTable, MergeSummary

MIN_SIMILARITY_THRESHOLD = 0.5
MAX_SIMILARITY_THRESHOLD = 1.0


class ConfigError(ValueError):
    """Raised when a configuration file is unreadable or invalid."""


def load_config_schema() -> dict[str, Any]:
    """Load the packaged JSON schema for merge configuration files."""
    schema_file = resources.files("tabmerge.schemas").joinpath("merge_config.schema.json")
    return json.loads(schema_file.read_text(encoding="utf-8"))


@dataclass
class PipelineConfig:
    """Configuration for a merge run.

    Attributes
    ----------
    key_column : str
        Column used to match rows across sources.
    similarity_threshold : float
        Minimum similarity in [0.5, 1.0] for fuzzy key matching
        (default: 0.85).
    output_path : Path | None
        Where to export the merged table. If None, nothing is written.
    track_execution_time : bool
        Record wall-clock time in the result.
    """

    key_column: str
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    output_path: Path | None = None
    track_execution_time: bool = False

    def __post_init__(self) -> None:
        """Validate and normalize fields."""
        if not self.key_column or not self.key_column.strip():
            raise ValueError("key_column must be a non-empty column name")

        if not MIN_SIMILARITY_THRESHOLD <= self.similarity_threshold <= MAX_SIMILARITY_THRESHOLD:
            raise ValueError(
                f"similarity_threshold must be in "
                f"[{MIN_SIMILARITY_THRESHOLD}, {MAX_SIMILARITY_THRESHOLD}], "
                f"got {self.similarity_threshold}"
            )

        if self.output_path is not None:
            self.output_path = Path(self.output_path)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PipelineConfig":
        """Build a config from a mapping validated against the config schema.

        Parameters
        ----------
        data : dict[str, Any]
            Configuration values.

        Returns
        -------
        PipelineConfig
            Validated configuration.

        Raises
        ------
        ConfigError
            If the mapping does not match the schema or lacks key_column.
        """
        try:
            jsonschema.validate(instance=data, schema=load_config_schema())
        except jsonschema.ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e.message}") from e

        if "key_column" not in data:
            raise ConfigError("Invalid configuration: 'key_column' is required")

        return cls(**data)

    @classmethod
    def from_file(cls, path: Path | str, **overrides: Any) -> "PipelineConfig":
        """Load a JSON configuration file.

        Parameters
        ----------
        path : Path | str
            JSON file with configuration values.
        **overrides : Any
            Values that replace those read from the file; None values are
            ignored.

        Returns
        -------
        PipelineConfig
            Validated configuration.

        Raises
        ------
        ConfigError
            If the file cannot be read or is invalid.
        """
        config_path = Path(path)
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read config {config_path.name}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Invalid configuration in {config_path.name}: expected an object")

        data.update({k: v for k, v in overrides.items() if v is not None})
        if isinstance(data.get("output_path"), Path):
            data["output_path"] = str(data["output_path"])
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["output_path"] = str(self.output_path) if self.output_path is not None else None
        return data


@dataclass
class PipelineResult:
    """Results from a merge run.

    Attributes
    ----------
    success : bool
        Whether loading and merging completed.
    sources : list[dict[str, Any]]
        Per-source counts in merge order: index (1-based), name and rows.
    total_rows : int
        Total rows across all sources.
    total_entities : int
        Rows in the merged table.
    entities_multi_source : int
        Entities matched across two or more sources.
    keyless_rows : int
        Rows whose key value was empty.
    output_path : str | None
        Exported file path, if the export succeeded.
    error_message : str | None
        Error message if the run failed.
    export_error : str | None
        Error message if only the export failed. The merged table is still
        available in ``table`` so the export can be retried.
    execution_time_seconds : float | None
        Wall-clock time when tracking is enabled.
    table : MergedTable | None
        Merged table (not serialized by to_dict).
    summary : MergeSummary | None
        Detailed merge counters (not serialized by to_dict).
    error : Exception | None
        Exception that failed the run (not serialized by to_dict).
    """

    success: bool
    sources: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    total_entities: int = 0
    entities_multi_source: int = 0
    keyless_rows: int = 0
    output_path: str | None = None
    error_message: str | None = None
    export_error: str | None = None
    execution_time_seconds: float | None = None
    table: MergedTable | None = field(default=None, repr=False)
    summary: MergeSummary | None = field(default=None, repr=False)
    error: Exception | None = field(default=None, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert scalar fields to a dictionary."""
        return {
            "success": self.success,
            "sources": [dict(s) for s in self.sources],
            "total_rows": self.total_rows,
            "total_entities": self.total_entities,
            "entities_multi_source": self.entities_multi_source,
            "keyless_rows": self.keyless_rows,
            "output_path": self.output_path,
            "error_message": self.error_message,
            "export_error": self.export_error,
            "execution_time_seconds": self.execution_time_seconds,
        }
