"""Config command implementation."""

from wireflow.commands.common import exit_on_error, load_project
from wireflow.discovery.display import print_config


def config_command(name: str | None = None) -> None:
    """Show effective configuration and where each value came from.

    Without a name, shows the project baseline (builtin, global and
    project tiers).
    """
    with exit_on_error():
        project = load_project()
        settings = project.workflow_settings(name) if name else project.baseline
        # Raises ConfigurationError for an unknown profile
        settings.generation.snapshot()
    print_config(name, settings)
