"""Pipeline orchestration engine.

Entry point for running a complete merge, including configuration and
result types.
"""

from tabmerge.engine.config import ConfigError, PipelineConfig, PipelineResult
from tabmerge.engine.runner import export_result, run_pipeline

__all__ = [
    "ConfigError",
    "PipelineConfig",
    "PipelineResult",
    "export_result",
    "run_pipeline",
]
