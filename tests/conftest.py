"""Shared pytest fixtures for wireflow tests.

Provides an isolated environment, project scaffolding helpers and a mock
generation backend wired through the Container.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from wireflow.engine import Container
from wireflow.engine.mocks import MockGenerationBackend
from wireflow.engine.runner import WorkflowRunner
from wireflow.env import clear_settings_cache
from wireflow.pipeline.driver import PipelineDriver
from wireflow.project.context import ProjectContext
from wireflow.scaffold.init import init_project


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point global config at an empty temp directory and drop real credentials."""
    config_home = tmp_path / "config-home"
    config_home.mkdir()
    monkeypatch.setenv("WIREFLOW_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("WIREFLOW_PROMPT_PREFIX", raising=False)
    monkeypatch.delenv("WIREFLOW_DRY_RUN", raising=False)
    monkeypatch.delenv("WIREFLOW_LOG_LEVEL", raising=False)
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    clear_settings_cache()
    yield config_home
    clear_settings_cache()


@pytest.fixture
def mock_backend() -> MockGenerationBackend:
    """Fixture that sets up and tears down a mock backend via Container.

    Yields:
        MockGenerationBackend echoing the workflow's task text
    """

    def echo_task(request: Any) -> str:
        return f"generated: {request.messages[0]['content'][-1]['text'].strip()}"

    backend = MockGenerationBackend(text=echo_task)
    Container.set_backend(backend)
    yield backend
    Container.reset()


@pytest.fixture
def failing_backend() -> MockGenerationBackend:
    """Fixture that provides a mock backend whose calls always fail."""
    backend = MockGenerationBackend(error=RuntimeError("API unavailable"))
    Container.set_backend(backend)
    yield backend
    Container.reset()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """An initialized, empty wireflow project."""
    root = tmp_path / "project"
    root.mkdir()
    init_project(root)
    return root


@pytest.fixture
def make_workflow(project_root: Path) -> Callable[..., Path]:
    """Factory creating a workflow directory with a task and config.yaml."""

    def _make(name: str, task: str | None = None, **config: Any) -> Path:
        workflow_dir = project_root / ".workflow" / "run" / name
        workflow_dir.mkdir(parents=True, exist_ok=True)
        (workflow_dir / "task.txt").write_text(task if task is not None else f"Task for {name}\n")
        (workflow_dir / "config.yaml").write_text(yaml.safe_dump(config) if config else "")
        return workflow_dir

    return _make


@pytest.fixture
def write_file(project_root: Path) -> Callable[[str, str], Path]:
    """Factory writing a project-relative file."""

    def _write(rel_path: str, content: str) -> Path:
        path = project_root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def load_project(project_root: Path) -> Callable[[], ProjectContext]:
    """Load a fresh ProjectContext (baseline captured at call time)."""

    def _load() -> ProjectContext:
        return ProjectContext(project_root)

    return _load


@pytest.fixture
def driver_for(mock_backend: MockGenerationBackend) -> Callable[[ProjectContext], PipelineDriver]:
    """Build a PipelineDriver over the mock backend."""

    def _driver(project: ProjectContext) -> PipelineDriver:
        return PipelineDriver(project, WorkflowRunner(project, mock_backend))

    return _driver
