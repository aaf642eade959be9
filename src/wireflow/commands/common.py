"""Helpers shared by command implementations."""

from collections.abc import Iterator
from contextlib import contextmanager

from rich.markup import escape

from wireflow.discovery.display import print_error
from wireflow.exceptions import WireflowError
from wireflow.project.context import ProjectContext


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print a WireflowError and exit 1 instead of showing a traceback."""
    try:
        yield
    except WireflowError as e:
        print_error(escape(e.message))
        raise SystemExit(1) from None


def load_project() -> ProjectContext:
    """Load the project containing the current directory."""
    return ProjectContext.discover()
