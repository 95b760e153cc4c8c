"""End-to-end merge pipeline runner.

Chains the three stages of a merge run:

    Stage 1: Load source files
    Stage 2: Merge rows into entities
    Stage 3: Export the merged table (only when an output path is set)

Load and merge failures end the run with ``success=False``. An export
failure does not: the merged table is kept on the result so the caller
can retry the export.
"""

import time
import traceback
from collections.abc import Sequence
from pathlib import Path

from tabmerge.audit.context import RunContext
from tabmerge.engine.config import PipelineConfig, PipelineResult
from tabmerge.merge.columns import column_union
from tabmerge.merge.engine import merge_with_summary
from tabmerge.merge.models import MergedTable, MergeSummary
from tabmerge.models import SourceCollection
from tabmerge.tables import ExportError, FileLoadResult, load_collections, write_table

__all__ = ["run_pipeline", "export_result"]


def _stage1_load(
    input_paths: Sequence[Path],
    run: RunContext | None,
) -> tuple[list[SourceCollection], list[FileLoadResult]]:
    """Stage 1: Load every source file."""
    if run:
        run.start_stage("stage1_load")

    collections, results = load_collections(input_paths)

    if run:
        run.record_inputs(results)
        run.finish_stage(
            "stage1_load",
            counters={
                "files_loaded": len(results),
                "rows_loaded": sum(r.rows_loaded for r in results),
                "rows_discarded": sum(r.rows_discarded for r in results),
            },
        )

    return collections, results


def _stage2_merge(
    collections: list[SourceCollection],
    config: PipelineConfig,
    run: RunContext | None,
) -> tuple[MergedTable, MergeSummary]:
    """Stage 2: Validate the key column and merge rows."""
    available = column_union(collections)
    if config.key_column not in available:
        raise ValueError(
            f"Key column '{config.key_column}' not found in any source. "
            f"Available columns: {', '.join(available)}"
        )

    if run:
        run.start_stage("stage2_merge", expected_rows=sum(len(c) for c in collections))

    table, summary = merge_with_summary(
        collections,
        config.key_column,
        config.similarity_threshold,
    )

    if run:
        run.record_summary(summary)
        run.finish_stage(
            "stage2_merge",
            counters={
                "rows_in": summary.rows_in_total,
                "entities_out": summary.entities_out,
                "entities_multi_source": summary.entities_multi_source,
                "keyless_rows": summary.keyless_rows,
            },
        )

    return table, summary


def export_result(
    result: PipelineResult,
    output_path: Path | str,
    run: RunContext | None = None,
) -> PipelineResult:
    """Export the merged table held by a result.

    Can be called again after a failed export.

    Parameters
    ----------
    result : PipelineResult
        Successful pipeline result carrying a table.
    output_path : Path | str
        Destination file.
    run : RunContext | None, optional
        Audit context.

    Returns
    -------
    PipelineResult
        The same result, with ``output_path`` or ``export_error`` updated.

    Raises
    ------
    ValueError
        If the result holds no merged table.
    """
    if result.table is None:
        raise ValueError("Result has no merged table to export")

    path = Path(output_path)

    if run:
        run.start_stage("stage3_export", expected_rows=len(result.table))

    try:
        rows_written = write_table(result.table, path)
    except ExportError as e:
        result.export_error = str(e)
        result.output_path = None
        if run:
            run.record_error(e, stage="stage3_export")
            run.finish_stage("stage3_export", counters={"rows_written": 0})
        return result

    result.export_error = None
    result.output_path = str(path)

    if run:
        run.record_output(path, row_count=rows_written)
        run.finish_stage("stage3_export", counters={"rows_written": rows_written})

    return result


def run_pipeline(
    input_paths: Sequence[Path | str],
    config: PipelineConfig,
    run: RunContext | None = None,
) -> PipelineResult:
    """Run the complete merge pipeline.

    Parameters
    ----------
    input_paths : Sequence[Path | str]
        Source table files; their order defines source indexes.
    config : PipelineConfig
        Merge configuration.
    run : RunContext | None, optional
        Audit context for events and manifest. If None, no audit trail is
        written.

    Returns
    -------
    PipelineResult
        Run results. Never raises for load or merge failures.

    Examples
    --------
        >>> from tabmerge.engine import PipelineConfig, run_pipeline
        >>> config = PipelineConfig(key_column="sku", output_path=Path("out.csv"))
        >>> result = run_pipeline(["vendor_a.csv", "vendor_b.csv"], config)
        >>> result.total_entities
        118
    """
    start_time = time.perf_counter() if config.track_execution_time else None
    paths = [Path(p) for p in input_paths]

    try:
        collections, _ = _stage1_load(paths, run)
        table, summary = _stage2_merge(collections, config, run)
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        if run:
            failed_file = getattr(e, "file", None)
            source = Path(failed_file).name if failed_file else None
            run.audit_logger.event(
                "pipeline_error",
                data={"error": error_msg, "traceback": traceback.format_exc()},
                level="ERROR",
                stage="pipeline",
                source=source,
            )
            run.record_error(e, source=source)
        return PipelineResult(success=False, error_message=error_msg, error=e)

    result = PipelineResult(
        success=True,
        sources=[
            {"index": index, "name": stats.name, "rows": stats.rows}
            for index, stats in enumerate(summary.sources, start=1)
        ],
        total_rows=summary.rows_in_total,
        total_entities=summary.entities_out,
        entities_multi_source=summary.entities_multi_source,
        keyless_rows=summary.keyless_rows,
        table=table,
        summary=summary,
    )

    if config.output_path is not None:
        export_result(result, config.output_path, run)

    if start_time is not None:
        result.execution_time_seconds = time.perf_counter() - start_time

    return result
