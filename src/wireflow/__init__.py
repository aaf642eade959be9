"""wireflow - incremental AI workflows.

Named workflows that depend on each other, re-run only when their inputs change.
"""

from wireflow.exceptions import (
    CircularDependencyError,
    ConfigurationError,
    DependencyError,
    DependencyExecutionError,
    DependencyNotFoundError,
    DependencyOutputMissingError,
    ExecutionError,
    ExecutionFailedError,
    InvalidArgumentError,
    ProjectNotInitializedError,
    TaskFileNotFoundError,
    ValidationError,
    WireflowError,
    WorkflowAlreadyExistsError,
    WorkflowConfigError,
    WorkflowError,
    WorkflowNotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    # Base exception
    "WireflowError",
    # Configuration
    "ConfigurationError",
    "ProjectNotInitializedError",
    # Workflow
    "WorkflowError",
    "WorkflowNotFoundError",
    "WorkflowConfigError",
    "WorkflowAlreadyExistsError",
    "TaskFileNotFoundError",
    # Dependencies
    "DependencyError",
    "CircularDependencyError",
    "DependencyNotFoundError",
    "DependencyExecutionError",
    "DependencyOutputMissingError",
    # Execution
    "ExecutionError",
    "ExecutionFailedError",
    # Validation
    "ValidationError",
    "InvalidArgumentError",
]
