"""Tests for execution log persistence."""

import json
from pathlib import Path

from wireflow.core.schemas import ExecutionLog, OutputRecord, WorkflowSettings
from wireflow.pipeline.log_store import ExecutionLogStore, parse_executed_at, utc_timestamp


def make_store(tmp_path: Path) -> ExecutionLogStore:
    workflows_root = tmp_path / ".workflow" / "run"
    (workflows_root / "extract").mkdir(parents=True)
    (workflows_root / "report").mkdir(parents=True)
    return ExecutionLogStore(tmp_path, workflows_root)


def sample_log(name: str, execution_hash: str) -> ExecutionLog:
    return ExecutionLog(
        workflow=name,
        executed_at=utc_timestamp(),
        execution_hash=execution_hash,
        output=OutputRecord(path=f".workflow/run/{name}/output.md"),
    )


class TestTimestamps:
    """Tests for executed_at formatting and parsing."""

    def test_round_trip(self) -> None:
        """Test a written timestamp parses back to epoch seconds."""
        stamp = utc_timestamp()
        assert stamp.endswith("Z")
        assert parse_executed_at(stamp) is not None

    def test_second_precision_accepted(self) -> None:
        """Test timestamps without fractional seconds still parse."""
        assert parse_executed_at("2025-01-02T03:04:05Z") == 1735787045.0

    def test_garbage_rejected(self) -> None:
        """Test unparsable values yield None."""
        assert parse_executed_at("yesterday") is None
        assert parse_executed_at("") is None


class TestExecutionLogStore:
    """Tests for ExecutionLogStore."""

    def test_read_missing(self, tmp_path: Path) -> None:
        """Test a workflow without a log reads as None."""
        assert make_store(tmp_path).read("extract") is None

    def test_write_then_read(self, tmp_path: Path) -> None:
        """Test a written log is read back with version 1 and 2-space indent."""
        store = make_store(tmp_path)
        path = store.write(sample_log("extract", "aaaa"))

        assert path == tmp_path / ".workflow" / "run" / "extract" / "execution.json"
        assert path.read_text().startswith('{\n  "version": 1,')
        assert store.read("extract").execution_hash == "aaaa"
        assert store.recorded_hash("extract") == "aaaa"

    def test_overwrite_replaces(self, tmp_path: Path) -> None:
        """Test a second write replaces the first entirely."""
        store = make_store(tmp_path)
        store.write(sample_log("extract", "aaaa"))
        store.write(sample_log("extract", "bbbb"))

        data = json.loads(store.log_path("extract").read_text())
        assert data["execution_hash"] == "bbbb"
        assert not list(store.log_path("extract").parent.glob(".execution-*"))

    def test_corrupt_log_is_treated_as_missing(self, tmp_path: Path) -> None:
        """Test unparsable JSON reads as never executed."""
        store = make_store(tmp_path)
        store.log_path("extract").write_text("{not json")
        assert store.read("extract") is None
        assert store.recorded_hash("extract") is None

    def test_undecodable_log_is_treated_as_missing(self, tmp_path: Path) -> None:
        """Test a log that is not valid UTF-8 reads as never executed."""
        store = make_store(tmp_path)
        store.log_path("extract").write_bytes(b"\xff\xfe{not json")
        assert store.read("extract") is None
        assert store.recorded_hash("extract") is None

    def test_schema_violation_is_treated_as_missing(self, tmp_path: Path) -> None:
        """Test a log missing required fields reads as None."""
        store = make_store(tmp_path)
        store.log_path("extract").write_text(json.dumps({"version": 1, "workflow": "extract"}))
        assert store.read("extract") is None

    def test_build_snapshots_dependency_hash(self, tmp_path: Path) -> None:
        """Test dependency entries copy the dependency's current recorded hash."""
        store = make_store(tmp_path)
        store.write(sample_log("extract", "dep-hash"))
        (tmp_path / "notes.md").write_text("notes")
        output = tmp_path / ".workflow" / "run" / "report" / "output.md"
        output.write_text("report body")

        settings = WorkflowSettings(context=("notes.md", "missing.md"), depends_on=("extract",))
        log = store.build("report", settings, "report-hash", output)

        assert log.depends_on[0].workflow == "extract"
        assert log.depends_on[0].execution_hash == "dep-hash"
        assert log.depends_on[0].output_path == ".workflow/run/extract/output.md"
        assert [record.path for record in log.context] == ["notes.md"]
        assert log.output.path == ".workflow/run/report/output.md"
        assert log.output.size == len("report body")
        assert log.output.hash.startswith("sha256:")
        assert log.config["model"] == "claude-sonnet-4-5"
        assert log.config_sources["temperature"] == "builtin"

        # Snapshot, not a live reference
        store.write(sample_log("extract", "newer"))
        assert log.depends_on[0].execution_hash == "dep-hash"
