"""Where the generation backend is chosen and runners are wired.

Commands ask the Container for a driver; tests swap the backend here
instead of patching the Anthropic client.

Usage:
    # Real backend
    driver = Container.pipeline_driver(project)

    # Testing with mocks
    Container.set_backend(MockGenerationBackend())
    driver = Container.pipeline_driver(project)

    # Reset to defaults
    Container.reset()
"""

from typing import TYPE_CHECKING

from wireflow.engine.backends import AnthropicBackend
from wireflow.engine.protocols import GenerationBackend
from wireflow.engine.runner import WorkflowRunner
from wireflow.pipeline.driver import PipelineDriver

if TYPE_CHECKING:
    from wireflow.project.context import ProjectContext


class Container:
    """Holds the process-wide backend and builds runners around it.

    Provides lazy initialization of the default backend and allows
    overriding it for testing purposes.
    """

    _backend: GenerationBackend | None = None

    @classmethod
    def backend(cls) -> GenerationBackend:
        """Get the generation backend.

        Returns AnthropicBackend by default.
        """
        if cls._backend is None:
            cls._backend = AnthropicBackend()
        return cls._backend

    @classmethod
    def workflow_runner(cls, project: "ProjectContext") -> WorkflowRunner:
        """Create a WorkflowRunner bound to the current backend."""
        return WorkflowRunner(project, backend=cls.backend())

    @classmethod
    def pipeline_driver(cls, project: "ProjectContext") -> PipelineDriver:
        """Create a PipelineDriver for a project.

        Used by the run command.
        """
        return PipelineDriver(project, cls.workflow_runner(project))

    @classmethod
    def set_backend(cls, backend: GenerationBackend | None) -> None:
        """Override the generation backend.

        None restores AnthropicBackend on next access.
        """
        cls._backend = backend

    @classmethod
    def reset(cls) -> None:
        """Drop any injected backend.

        Test fixtures call this on teardown.
        """
        cls._backend = None
