"""wireflow exception hierarchy.

Everything the engine raises on purpose derives from WireflowError. The CLI
prints those as one-line messages and exits 1; any other exception is a bug
and keeps its traceback.

Usage:
    from wireflow.exceptions import CircularDependencyError, WireflowError

    try:
        driver.run("report", settings)
    except CircularDependencyError as e:
        print(f"Cycle: {' -> '.join(e.path)}")
    except WireflowError as e:
        print(f"wireflow error: {e}")
"""


class WireflowError(Exception):
    """Base exception for all wireflow errors.

    All wireflow-specific exceptions inherit from this class, allowing
    callers to catch all wireflow errors with a single except clause.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# Configuration Errors


class ConfigurationError(WireflowError):
    """Error in wireflow configuration.

    Raised when a global or project config.yaml is invalid, or when
    resolved values are incompatible (e.g. an unknown profile).
    """

    pass


class ProjectNotInitializedError(ConfigurationError):
    """No wireflow project found.

    Raised when a command requires a .workflow/ directory but none exists
    in the current directory or any of its parents.
    """

    def __init__(self, path: str | None = None) -> None:
        self.path = path
        message = "No wireflow project found"
        if path:
            message = f"No wireflow project found at {path}"
        message += ". Run 'wfw init' to initialize a project."
        super().__init__(message)


# Workflow Errors


class WorkflowError(WireflowError):
    """A workflow is missing, malformed or cannot be created."""

    pass


class WorkflowNotFoundError(WorkflowError):
    """Workflow not found.

    Raised when a workflow name doesn't match any directory under the
    workflows root.
    """

    def __init__(self, workflow_name: str) -> None:
        self.workflow_name = workflow_name
        super().__init__(
            f"Workflow not found: '{workflow_name}'. "
            f"Run 'wfw new {workflow_name}' to create it."
        )


class WorkflowConfigError(WorkflowError):
    """A workflow config.yaml that cannot be used.

    Raised when a workflow's config.yaml cannot be parsed or contains
    values of the wrong type.
    """

    def __init__(self, workflow_name: str, reason: str) -> None:
        self.workflow_name = workflow_name
        self.reason = reason
        super().__init__(f"Invalid workflow config for '{workflow_name}': {reason}")


class WorkflowAlreadyExistsError(WorkflowError):
    """Workflow already exists."""

    def __init__(self, workflow_name: str) -> None:
        self.workflow_name = workflow_name
        super().__init__(f"Workflow already exists: {workflow_name}")


class TaskFileNotFoundError(WorkflowError):
    """The workflow has no task.txt to execute."""

    def __init__(self, workflow_name: str, task_path: str) -> None:
        self.workflow_name = workflow_name
        self.task_path = task_path
        super().__init__(
            f"Task file not found: {task_path}. "
            f"Workflow may be incomplete. Re-create with: wfw new {workflow_name}"
        )


# Dependency Errors


class DependencyError(WorkflowError):
    """Base class for dependency resolution and execution errors."""

    pass


class CircularDependencyError(DependencyError):
    """The dependency graph contains a cycle.

    The path includes the revisited node at both ends of the cycle,
    e.g. ["a", "b", "c", "a"].
    """

    def __init__(self, path: list[str]) -> None:
        self.path = list(path)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.path)}")


class DependencyNotFoundError(DependencyError):
    """A declared dependency has no workflow directory."""

    def __init__(self, dependency: str, required_by: str) -> None:
        self.dependency = dependency
        self.required_by = required_by
        super().__init__(
            f"Dependency workflow not found: '{dependency}' (required by '{required_by}'). "
            f"Create it with: wfw new {dependency}"
        )


class DependencyExecutionError(DependencyError):
    """A dependency failed, so the rest of the pipeline was aborted."""

    def __init__(self, dependency: str, exit_code: int, reason: str = "") -> None:
        self.dependency = dependency
        self.exit_code = exit_code
        self.reason = reason
        message = f"Dependency '{dependency}' failed with exit code {exit_code}"
        if reason:
            message += f": {reason[:200]}"
        super().__init__(message)


class DependencyOutputMissingError(DependencyError):
    """A dependency has no output to feed into the dependent workflow."""

    def __init__(self, dependency: str, expected: str) -> None:
        self.dependency = dependency
        self.expected = expected
        super().__init__(
            f"Dependency output not found for workflow: {dependency}. "
            f"Expected file matching: {expected}. "
            f"Ensure workflow '{dependency}' has been executed successfully."
        )


# Execution Errors


class ExecutionError(WireflowError):
    """Running a single workflow failed."""

    pass


class ExecutionFailedError(ExecutionError):
    """The generation call for a workflow failed.

    Wraps whatever the backend raised after retries were exhausted.
    """

    def __init__(self, workflow_name: str, exit_code: int, stderr: str = "") -> None:
        self.workflow_name = workflow_name
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"Workflow '{workflow_name}' failed with exit code {exit_code}"
        if stderr:
            message += f": {stderr[:200]}"
        super().__init__(message)


# Validation Errors


class ValidationError(WireflowError):
    """User input failed validation before anything ran."""

    pass


class InvalidArgumentError(ValidationError):
    """A CLI option or argument value was rejected.

    Carries the option name so the message can point at it.
    """

    def __init__(self, argument: str, reason: str) -> None:
        self.argument = argument
        self.reason = reason
        super().__init__(f"Invalid argument '{argument}': {reason}")
