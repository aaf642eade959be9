"""List command implementation."""

from wireflow.commands.common import exit_on_error, load_project
from wireflow.discovery.display import print_workflow_list
from wireflow.discovery.workflow import list_workflows


def list_command() -> None:
    """List workflows with their last execution and status.

    This function contains the business logic for the list command.
    """
    with exit_on_error():
        project = load_project()
        workflows = list_workflows(project)
    print_workflow_list(workflows)
