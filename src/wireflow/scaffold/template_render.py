"""Jinja2 rendering for the files created by `wfw init` and `wfw new`."""

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATES_DIR = Path(__file__).parent / "templates"


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def render_template(template_path: str, **variables: Any) -> str:
    """Render a template under templates/, e.g. "workflow/config.yaml.j2"."""
    return _environment().get_template(template_path).render(**variables)
