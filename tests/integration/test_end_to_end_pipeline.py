"""Integration tests for the end-to-end merge pipeline.

Runs the three stages (load, merge, export) on the vendor fixtures in
tests/fixtures/tables.
"""

import csv
import json
from pathlib import Path

import jsonschema
import pytest
from click.testing import CliRunner

from tabmerge.audit import RunContext
from tabmerge.cli.main import cli
from tabmerge.engine import PipelineConfig, run_pipeline

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "tables"
SCHEMAS_DIR = Path(__file__).parent.parent.parent / "schemas"

VENDOR_FILES = [
    FIXTURES_DIR / "vendor_a.csv",
    FIXTURES_DIR / "vendor_b.csv",
    FIXTURES_DIR / "vendor_c.jsonl",
]


def _read_csv(path: Path) -> list[dict[str, str]]:
    with path.open(encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


@pytest.mark.integration
def test_three_vendor_merge(tmp_path: Path) -> None:
    """Test a full merge of three vendor files with CSV output."""
    output = tmp_path / "comparison.csv"
    config = PipelineConfig(key_column="sku", output_path=output)

    result = run_pipeline(VENDOR_FILES, config)

    assert result.success
    assert [s["rows"] for s in result.sources] == [5, 4, 3]
    assert result.total_rows == 12
    assert result.total_entities == 7
    assert result.entities_multi_source == 4
    assert result.keyless_rows == 2

    rows = _read_csv(output)
    assert list(rows[0]) == [
        "1_sku",
        "1_description",
        "1_price",
        "2_sku",
        "2_description",
        "2_price",
        "2_stock",
        "3_sku",
        "3_lead_time_days",
    ]
    assert len(rows) == 7

    # Case-only difference
    assert (rows[0]["1_sku"], rows[0]["2_sku"]) == ("HB-10001", "hb-10001")
    # First fuzzy match wins for both later sources
    assert (rows[1]["1_sku"], rows[1]["2_sku"], rows[1]["3_sku"]) == (
        "HB-10002",
        "HB-10003",
        "HB-1002",
    )
    # Numeric key with leading zeros
    assert (rows[3]["1_sku"], rows[3]["2_sku"]) == ("0042", "42")
    # Keyless rows stay on their own
    assert rows[4]["1_description"] == "Assorted kit"
    assert rows[4]["2_sku"] == rows[4]["3_sku"] == ""
    assert rows[6]["3_lead_time_days"] == "30"


@pytest.mark.integration
def test_stricter_threshold_splits_fuzzy_matches() -> None:
    """Test raising the threshold only ever adds entities."""
    counts = []
    for threshold in (0.5, 0.85, 0.9, 1.0):
        result = run_pipeline(
            VENDOR_FILES,
            PipelineConfig(key_column="sku", similarity_threshold=threshold),
        )
        assert result.success
        counts.append(result.total_entities)

    assert counts == sorted(counts)
    assert counts[1] == 7
    assert counts[2] == 9
    assert all(count <= 12 for count in counts)


@pytest.mark.integration
def test_merge_with_audit_trail(tmp_path: Path) -> None:
    """Test a merge with an audit trail produces schema-valid artifacts."""
    run_dir = tmp_path / "run"
    output = run_dir / "comparison.jsonl"
    config = PipelineConfig(key_column="sku", output_path=output, track_execution_time=True)

    with RunContext.start(output_dir=run_dir, parameters=config.to_dict()) as run:
        result = run_pipeline(VENDOR_FILES, config, run=run)

    assert result.success
    assert result.execution_time_seconds is not None

    manifest = json.loads((run_dir / "run.json").read_text(encoding="utf-8"))
    manifest_schema = json.loads(
        (SCHEMAS_DIR / "run_manifest.schema.json").read_text(encoding="utf-8")
    )
    jsonschema.validate(instance=manifest, schema=manifest_schema)

    assert manifest["status"] == "success"
    assert [f["format"] for f in manifest["inputs"]] == ["csv", "csv", "jsonl"]
    assert sum(f["rows_loaded"] for f in manifest["inputs"]) == 12
    assert manifest["merge"]["entities_out"] == 7
    assert {a["path"] for a in manifest["outputs"]} == {
        "comparison.jsonl",
        "events.jsonl",
    }

    lines = output.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 7
    first = json.loads(lines[0])
    assert first["2_stock"] == "1200"
    assert first["3_lead_time_days"] == ""


@pytest.mark.integration
def test_cli_end_to_end(tmp_path: Path) -> None:
    """Test the merge command on the vendor fixtures."""
    output = tmp_path / "comparison.tsv"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["merge", *map(str, VENDOR_FILES), "--key", "sku", "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert "[3] vendor_c.jsonl: 3 rows" in result.output
    assert "Merged 12 rows into 7 rows (4 matched across files)" in result.output
    assert len(output.read_text(encoding="utf-8").splitlines()) == 8
