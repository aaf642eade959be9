"""wfw CLI commands.

Each command module contains the business logic for a CLI command.
The cli.py module handles typer options and argument parsing,
then delegates to these command functions.
"""

from wireflow.commands.cat import cat_command
from wireflow.commands.config import config_command
from wireflow.commands.init import init_command
from wireflow.commands.list import list_command
from wireflow.commands.new import new_command
from wireflow.commands.run import run_command
from wireflow.commands.status import status_command

__all__ = [
    "cat_command",
    "config_command",
    "init_command",
    "list_command",
    "new_command",
    "run_command",
    "status_command",
]
