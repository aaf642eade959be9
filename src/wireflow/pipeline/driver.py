"""Pipeline driver: resolve, walk, execute stale nodes, log.

State machine:
    RESOLVING -> WALKING -> EXECUTING -> LOGGING -> WALKING ... -> DONE
LOGGING is entered from inside the runner, once the output is in place and
right before the execution log is written.
Any error moves the pipeline to FAILED and propagates; nodes after the
failing one are never run.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from wireflow.core.schemas import WorkflowSettings
from wireflow.pipeline.executor import execute_dependency, isolated_settings
from wireflow.pipeline.resolver import resolve_order
from wireflow.pipeline.staleness import check_staleness

if TYPE_CHECKING:
    from wireflow.engine.runner import WorkflowRunner
    from wireflow.project.context import ProjectContext

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    RESOLVING = "resolving"
    WALKING = "walking"
    EXECUTING = "executing"
    LOGGING = "logging"
    DONE = "done"
    FAILED = "failed"


class StepAction(str, Enum):
    EXECUTED = "executed"
    SKIPPED = "skipped"
    DRY_RUN = "dry-run"


class StepReport(BaseModel):
    """What happened to one node of the resolved order."""

    name: str
    action: StepAction
    reason: str = ""
    execution_hash: str | None = None


class PipelineReport(BaseModel):
    """Outcome of a pipeline run, in execution order."""

    target: str
    order: list[str] = Field(default_factory=list)
    steps: list[StepReport] = Field(default_factory=list)
    state: PipelineState = PipelineState.RESOLVING

    @property
    def executed(self) -> list[str]:
        return [s.name for s in self.steps if s.action == StepAction.EXECUTED]

    @property
    def skipped(self) -> list[str]:
        return [s.name for s in self.steps if s.action == StepAction.SKIPPED]


class PipelineDriver:
    """Runs a target workflow after bringing its dependencies up to date.

    Execution is sequential in resolved order. Each dependency runs with
    settings derived from the project baseline; only the target sees the
    caller's settings.
    """

    def __init__(self, project: "ProjectContext", runner: "WorkflowRunner") -> None:
        self.project = project
        self.runner = runner
        self.state = PipelineState.RESOLVING

    def _transition(self, state: PipelineState, name: str | None = None) -> None:
        self.state = state
        if name:
            logger.info("Pipeline %s: %s", state.value, name)
        else:
            logger.info("Pipeline %s", state.value)

    def run(
        self,
        target: str,
        settings: WorkflowSettings,
        force: bool = False,
        auto_deps: bool = True,
        dry_run: bool = False,
    ) -> PipelineReport:
        """Bring target up to date.

        Args:
            target: Workflow to produce
            settings: Resolved settings for the target (CLI overrides included)
            force: Execute every node of the order regardless of staleness
            auto_deps: Resolve and execute stale dependencies first
            dry_run: Write request payloads only; never call the backend

        Returns:
            PipelineReport with one StepReport per node

        Raises:
            WireflowError: On a cycle, a missing dependency, or a failed
                execution. The pipeline is left in FAILED.
        """
        report = PipelineReport(target=target)
        self._transition(PipelineState.RESOLVING, target)

        try:
            if auto_deps:
                extra = {target: list(settings.depends_on)} if settings.depends_on else None
                order = resolve_order(target, self.project.workflows_root, extra)
            else:
                order = [target]
            report.order = order

            for name in order[:-1]:
                self._transition(PipelineState.WALKING, name)
                report.steps.append(self._walk_dependency(name, force, dry_run))

            self._transition(PipelineState.WALKING, target)
            report.steps.append(self._walk_target(target, settings, force, dry_run))
        except Exception:
            self._transition(PipelineState.FAILED)
            report.state = PipelineState.FAILED
            raise

        self._transition(PipelineState.DONE)
        report.state = PipelineState.DONE
        return report

    def _walk_dependency(self, name: str, force: bool, dry_run: bool) -> StepReport:
        if force:
            reason = "forced"
        else:
            result = check_staleness(self.project, name, isolated_settings(self.project, name))
            if not result.stale:
                logger.info("Dependency %s is fresh, skipping", name)
                return StepReport(name=name, action=StepAction.SKIPPED, reason=result.reason)
            reason = result.reason

        if dry_run:
            # Dependencies are not executed in a dry run
            return StepReport(name=name, action=StepAction.DRY_RUN, reason=reason)

        self._transition(PipelineState.EXECUTING, name)
        outcome = execute_dependency(
            self.project, name, self.runner, on_log=lambda: self._transition(PipelineState.LOGGING, name)
        )
        return StepReport(
            name=name,
            action=StepAction.EXECUTED,
            reason=reason,
            execution_hash=outcome.execution_hash,
        )

    def _walk_target(self, target: str, settings: WorkflowSettings, force: bool, dry_run: bool) -> StepReport:
        if force:
            reason = "forced"
        else:
            result = check_staleness(self.project, target, settings)
            if not result.stale and not dry_run:
                logger.info("%s is fresh, skipping", target)
                return StepReport(name=target, action=StepAction.SKIPPED, reason=result.reason)
            reason = result.reason

        self._transition(PipelineState.EXECUTING, target)
        outcome = self.runner.run(
            target,
            settings,
            dry_run=dry_run,
            on_log=lambda: self._transition(PipelineState.LOGGING, target),
        )
        if dry_run:
            return StepReport(name=target, action=StepAction.DRY_RUN, reason=reason)

        return StepReport(
            name=target,
            action=StepAction.EXECUTED,
            reason=reason,
            execution_hash=outcome.execution_hash,
        )
