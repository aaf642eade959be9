"""Loaded project state shared by the pipeline and the CLI."""

import logging
from pathlib import Path

from wireflow.core.schemas import ConfigTier, WorkflowSettings
from wireflow.env import WireflowSettings, get_settings
from wireflow.exceptions import ConfigurationError, WorkflowConfigError, WorkflowNotFoundError
from wireflow.pipeline.log_store import ExecutionLogStore
from wireflow.project.config import (
    ConfigLayer,
    apply_layer,
    builtin_settings,
    clear_workflow_only,
    finalize,
    load_layer,
)
from wireflow.project.paths import (
    CONFIG_FILENAME,
    TASK_FILENAME,
    find_project_root,
    get_output_dir,
    get_wireflow_dir,
    get_workflows_dir,
)

logger = logging.getLogger(__name__)


class ProjectContext:
    """A project root plus the baseline configuration captured at load time.

    The baseline is builtin + global + project tiers. It is computed once and
    never modified, so every workflow's settings start from the same state
    regardless of which workflows were resolved before it.
    """

    def __init__(self, root: Path, env: WireflowSettings | None = None) -> None:
        self.root = root.resolve()
        self.env = env or get_settings()
        self.wireflow_dir = get_wireflow_dir(self.root)
        self.workflows_root = get_workflows_dir(self.root)
        self.output_dir = get_output_dir(self.root)
        self.log_store = ExecutionLogStore(self.root, self.workflows_root)
        self.baseline = self._load_baseline()

    @classmethod
    def discover(cls, start: Path | None = None, env: WireflowSettings | None = None) -> "ProjectContext":
        """Load the project containing start (default cwd)."""
        return cls(find_project_root(start), env=env)

    @property
    def project_config_file(self) -> Path:
        return self.wireflow_dir / CONFIG_FILENAME

    def workflow_dir(self, name: str) -> Path:
        return self.workflows_root / name

    def task_file(self, name: str) -> Path:
        return self.workflow_dir(name) / TASK_FILENAME

    def workflow_config_file(self, name: str) -> Path:
        return self.workflow_dir(name) / CONFIG_FILENAME

    def workflow_exists(self, name: str) -> bool:
        return self.workflow_dir(name).is_dir()

    def _load_baseline(self) -> WorkflowSettings:
        settings = builtin_settings()
        tiers = (
            (ConfigTier.GLOBAL, self.env.global_config_file),
            (ConfigTier.PROJECT, self.project_config_file),
        )
        for tier, path in tiers:
            try:
                layer = load_layer(path)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e
            settings = apply_layer(settings, layer, tier, self.root)
        logger.debug("Baseline configuration loaded for %s", self.root)
        return settings

    def load_workflow_layer(self, name: str) -> ConfigLayer:
        """Validated workflow tier for a workflow.

        Raises:
            WorkflowNotFoundError: If the workflow directory does not exist
            WorkflowConfigError: If its config.yaml is invalid
        """
        if not self.workflow_exists(name):
            raise WorkflowNotFoundError(name)
        try:
            return load_layer(self.workflow_config_file(name))
        except ValueError as e:
            raise WorkflowConfigError(name, str(e)) from e

    def workflow_settings(self, name: str, overrides: ConfigLayer | None = None) -> WorkflowSettings:
        """Resolve settings for one workflow in an isolated scope.

        Starts from the load-time baseline, clears workflow-only fields,
        then applies the workflow tier and optional CLI overrides.
        """
        settings = clear_workflow_only(self.baseline)
        settings = apply_layer(settings, self.load_workflow_layer(name), ConfigTier.WORKFLOW, self.root)
        if overrides is not None:
            settings = apply_layer(settings, overrides, ConfigTier.CLI, self.root)
        return finalize(settings)
