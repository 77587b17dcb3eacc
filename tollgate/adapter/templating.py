"""Jinja2 environment for the server-rendered pages."""

from pathlib import Path

from jinja2 import ChoiceLoader, Environment, FileSystemLoader

BUILTIN_TEMPLATES = Path(__file__).parent / "templates"


def _blank_none(value):
    return "" if value is None else value


def create_template_environment(template_path: Path | None = None) -> Environment:
    """Build the page template environment.

    Templates in ``template_path`` override the built-in ones of the
    same name. Output is always HTML-escaped.

    Args:
        template_path: Optional folder of deployment templates

    Returns:
        Configured Jinja2 environment
    """
    loaders = [FileSystemLoader(BUILTIN_TEMPLATES)]
    if template_path is not None:
        loaders.insert(0, FileSystemLoader(template_path))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
        finalize=_blank_none,
    )
