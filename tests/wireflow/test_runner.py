"""Tests for single-workflow execution and request assembly."""

import json
import os
from collections.abc import Callable
from pathlib import Path

import pytest

from wireflow.engine.mocks import MockGenerationBackend
from wireflow.engine.request import build_request, find_prompt_file, published_output
from wireflow.engine.runner import WorkflowRunner
from wireflow.exceptions import (
    ConfigurationError,
    DependencyOutputMissingError,
    ExecutionFailedError,
    TaskFileNotFoundError,
)
from wireflow.pipeline.hashing import file_record
from wireflow.pipeline.staleness import check_staleness
from wireflow.project.config import ConfigLayer
from wireflow.project.context import ProjectContext


def run_workflow(project: ProjectContext, backend: MockGenerationBackend, name: str, **overrides):
    settings = project.workflow_settings(name, ConfigLayer(**overrides) if overrides else None)
    return WorkflowRunner(project, backend).run(name, settings)


class TestBuildRequest:
    """Tests for request payload layout."""

    def test_block_order_and_cache_points(
        self,
        project_root: Path,
        make_workflow: Callable[..., Path],
        write_file: Callable[[str, str], Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test context, dependency, input and task blocks appear in that order."""
        write_file("ref/a.md", "reference a")
        write_file("ref/b.md", "reference b")
        write_file("data.csv", "1,2,3")
        make_workflow("extract")
        make_workflow(
            "report",
            task="Write the report\n",
            context=["ref/*.md"],
            input=["data.csv"],
            depends_on=["extract"],
        )
        project = load_project()
        run_workflow(project, mock_backend, "extract")

        request = build_request(project, "report", project.workflow_settings("report"))
        content = request.messages[0]["content"]

        assert [block["type"] for block in content] == ["document", "document", "text", "document", "text"]
        assert [content[0]["title"], content[1]["title"], content[3]["title"]] == [
            "ref/a.md",
            "ref/b.md",
            "data.csv",
        ]
        assert content[0]["source"] == {"type": "text", "media_type": "text/plain", "data": "reference a"}
        assert "cache_control" not in content[0]
        assert content[1]["cache_control"] == {"type": "ephemeral"}
        assert content[2]["cache_control"] == {"type": "ephemeral"}
        assert content[2]["text"].startswith('<dependency workflow="extract">')
        assert "cache_control" not in content[3]
        assert content[4] == {"type": "text", "text": "Write the report\n"}

    def test_system_prompts_and_project_description(
        self,
        project_root: Path,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
    ) -> None:
        """Test the builtin prompt comes first and the description is tagged with the root name."""
        (project_root / ".workflow" / "project.txt").write_text("A quarterly sales analysis.\n")
        make_workflow("report")
        project = load_project()

        system = build_request(project, "report", project.workflow_settings("report")).system

        assert len(system) == 2
        assert system[0]["cache_control"] == {"type": "ephemeral"}
        assert system[1]["text"] == "<project>\nA quarterly sales analysis.\n</project>"
        assert system[1]["cache_control"] == {"type": "ephemeral"}

    def test_empty_description_is_omitted(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
    ) -> None:
        """Test a blank project.txt adds no system block."""
        make_workflow("report")
        project = load_project()
        assert len(build_request(project, "report", project.workflow_settings("report")).system) == 1

    def test_prompt_prefix_overrides_builtin(
        self,
        isolated_env: Path,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
    ) -> None:
        """Test a prompt file under the user prefix shadows the packaged one."""
        prompts = isolated_env / "prompts" / "system"
        prompts.mkdir(parents=True)
        (prompts / "base.txt").write_text("Custom base prompt")
        (prompts / "terse.txt").write_text("Be terse.")
        make_workflow("report", system_prompts={"append": ["terse"]})
        project = load_project()

        system = build_request(project, "report", project.workflow_settings("report")).system
        assert [block["text"] for block in system] == ["Custom base prompt", "Be terse."]
        assert "cache_control" not in system[0]
        assert system[1]["cache_control"] == {"type": "ephemeral"}

    def test_unknown_prompt_component(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
    ) -> None:
        """Test a missing prompt component is a configuration error."""
        make_workflow("report", system_prompts=["nonexistent"])
        project = load_project()
        with pytest.raises(ConfigurationError, match="nonexistent"):
            build_request(project, "report", project.workflow_settings("report"))

    def test_builtin_prompt_is_packaged(self, tmp_path: Path) -> None:
        """Test the base prompt ships with the package."""
        assert find_prompt_file("base", tmp_path) is not None
        assert find_prompt_file("nonexistent", tmp_path) is None

    def test_thinking_and_effort(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
    ) -> None:
        """Test optional parameters appear only when they differ from defaults."""
        make_workflow("report")
        project = load_project()

        plain = build_request(project, "report", project.workflow_settings("report")).payload()
        assert "thinking" not in plain
        assert "output_config" not in plain

        settings = project.workflow_settings(
            "report", ConfigLayer(enable_thinking=True, thinking_budget=2048, effort="low")
        )
        payload = build_request(project, "report", settings).payload()
        assert payload["thinking"] == {"type": "enabled", "budget_tokens": 2048}
        assert payload["output_config"] == {"effort": "low"}

    def test_citations_flag(
        self,
        make_workflow: Callable[..., Path],
        write_file: Callable[[str, str], Path],
        load_project: Callable[[], ProjectContext],
    ) -> None:
        """Test citations are enabled on every document block."""
        write_file("notes.md", "notes")
        make_workflow("report", context=["notes.md"], enable_citations=True)
        project = load_project()

        content = build_request(project, "report", project.workflow_settings("report")).messages[0]["content"]
        assert content[0]["citations"] == {"enabled": True}

    def test_missing_context_file_is_skipped(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a missing context file is skipped with a warning."""
        make_workflow("report", context=["missing.md"])
        project = load_project()

        content = build_request(project, "report", project.workflow_settings("report")).messages[0]["content"]
        assert [block["type"] for block in content] == ["text"]
        assert "missing.md" in caplog.text

    def test_missing_task(self, make_workflow: Callable[..., Path], load_project: Callable[[], ProjectContext]) -> None:
        """Test a workflow without task.txt cannot be built."""
        workflow_dir = make_workflow("report")
        (workflow_dir / "task.txt").unlink()
        project = load_project()
        with pytest.raises(TaskFileNotFoundError, match="wfw new report"):
            build_request(project, "report", project.workflow_settings("report"))

    def test_missing_dependency_output(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
    ) -> None:
        """Test a dependency that never ran fails strict builds only."""
        make_workflow("extract")
        make_workflow("report", depends_on=["extract"])
        project = load_project()
        settings = project.workflow_settings("report")

        with pytest.raises(DependencyOutputMissingError, match="extract"):
            build_request(project, "report", settings)
        lenient = build_request(project, "report", settings, strict=False)
        assert len(lenient.messages[0]["content"]) == 1


class TestWorkflowRunner:
    """Tests for WorkflowRunner.run."""

    def test_writes_request_output_and_log(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test a successful run writes every artifact."""
        workflow_dir = make_workflow("extract", task="Extract\n")
        project = load_project()

        outcome = run_workflow(project, mock_backend, "extract")

        assert outcome.output_file == workflow_dir / "output.md"
        assert outcome.output_file.read_text() == "generated: Extract"
        payload = json.loads(outcome.request_file.read_text())
        assert payload["model"] == "claude-sonnet-4-5"
        assert payload["max_tokens"] == 16000

        log = project.log_store.read("extract")
        assert log.execution_hash == outcome.execution_hash
        assert log.output.path == ".workflow/run/extract/output.md"

    def test_output_is_published(
        self,
        project_root: Path,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test the output is visible under .workflow/output."""
        make_workflow("extract")
        project = load_project()

        outcome = run_workflow(project, mock_backend, "extract")

        published = project.root / ".workflow" / "output" / "extract.md"
        assert outcome.published_file == published
        assert (project_root / ".workflow" / "output" / "extract.md").is_file()
        assert published.read_text() == outcome.output_file.read_text()
        assert published_output(project, "extract") == published

    def test_output_format(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test output_format selects the artifact extension."""
        make_workflow("extract", output_format="json")
        project = load_project()
        outcome = run_workflow(project, mock_backend, "extract")
        assert outcome.output_file.name == "output.json"
        assert published_output(project, "extract").name == "extract.json"

    def test_previous_output_backed_up(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test re-running keeps the previous output as a backup."""
        workflow_dir = make_workflow("extract")
        project = load_project()
        mock_backend.set_text("first")
        run_workflow(project, mock_backend, "extract")
        mock_backend.set_text("second")
        run_workflow(project, mock_backend, "extract")

        assert (workflow_dir / "output.md").read_text() == "second"
        assert (workflow_dir / "output.md.bak").read_text() == "first"
        assert (project.output_dir / "extract.md").read_text() == "second"

    def test_export_file(
        self,
        project_root: Path,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test export_file receives a copy, relative paths resolved from the root."""
        make_workflow("extract", export_file="reports/extract.md")
        project = load_project()
        mock_backend.set_text("exported")

        outcome = run_workflow(project, mock_backend, "extract")

        assert outcome.export_file == project.root / "reports" / "extract.md"
        assert (project_root / "reports" / "extract.md").read_text() == "exported"

    def test_dry_run_writes_request_only(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test a dry run never calls the backend and writes no log."""
        workflow_dir = make_workflow("extract")
        project = load_project()

        outcome = WorkflowRunner(project, mock_backend).run(
            "extract", project.workflow_settings("extract"), dry_run=True
        )

        assert outcome.dry_run
        assert (workflow_dir / "request.json").is_file()
        assert mock_backend.call_count == 0
        assert not (workflow_dir / "output.md").exists()
        assert project.log_store.read("extract") is None

    def test_backend_failure(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        failing_backend: MockGenerationBackend,
    ) -> None:
        """Test a failed call leaves no output and no log behind."""
        workflow_dir = make_workflow("extract")
        project = load_project()

        with pytest.raises(ExecutionFailedError) as exc_info:
            run_workflow(project, failing_backend, "extract")

        assert exc_info.value.workflow_name == "extract"
        assert "API unavailable" in str(exc_info.value)
        assert (workflow_dir / "request.json").is_file()
        assert not (workflow_dir / "output.md").exists()
        assert project.log_store.read("extract") is None

    def test_failure_keeps_previous_output(
        self,
        make_workflow: Callable[..., Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test a failed re-run leaves the last good output and log in place."""
        workflow_dir = make_workflow("extract")
        project = load_project()
        mock_backend.set_text("good")
        first = run_workflow(project, mock_backend, "extract")

        mock_backend.fail_with(RuntimeError("boom"))
        with pytest.raises(ExecutionFailedError):
            run_workflow(project, mock_backend, "extract")

        assert (workflow_dir / "output.md").read_text() == "good"
        assert not (workflow_dir / "output.md.bak").exists()
        assert project.log_store.recorded_hash("extract") == first.execution_hash

    def test_log_describes_inputs_the_request_was_built_from(
        self,
        make_workflow: Callable[..., Path],
        write_file: Callable[[str, str], Path],
        load_project: Callable[[], ProjectContext],
        mock_backend: MockGenerationBackend,
    ) -> None:
        """Test a context file edited during generation leaves the workflow stale."""
        notes = write_file("notes.md", "original notes")
        make_workflow("extract", context=["notes.md"])
        project = load_project()
        before = file_record(project.root, "notes.md")

        def edit_while_generating(request) -> str:
            notes.write_text("edited notes")
            stat = notes.stat()
            os.utime(notes, (stat.st_atime, stat.st_mtime + 10))
            return "generated from original notes"

        mock_backend.set_text(edit_while_generating)
        run_workflow(project, mock_backend, "extract")

        log = project.log_store.read("extract")
        assert log.context[0].hash == before.hash
        assert log.context[0].mtime == before.mtime
        assert log.output.size == len("generated from original notes")

        result = check_staleness(project, "extract", project.workflow_settings("extract"))
        assert result.stale
        assert result.reason == "context changed"
