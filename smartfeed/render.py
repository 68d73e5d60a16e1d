"""Render the XML fragments injected into the feed from Jinja2 partials."""

from jinja2 import Environment, FileSystemLoader

from .common import TEMPLATES_DIR

_env = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)


def render(name: str, **context) -> str:
    template = _env.get_template(name)
    return template.render(**context)
