"""Jinja2 template engine adapter."""

from collections.abc import Callable
from dataclasses import fields
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

import structlog
from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader
from markupsafe import Markup

from folio.common.constants import REDIRECT_TEMPLATE, TEMPLATE_EXTENSION
from folio.content.models import first_paragraph
from folio.generator.template_data import TemplateData

logger = structlog.get_logger(__name__)

REDIRECT_HTML = """<!DOCTYPE html>
<html>
<head>
	<meta charset="utf-8">
	<link rel="canonical" href="{{ url }}">
	<meta http-equiv="refresh" content="0; url={{ url }}">
	<title>Redirect</title>
</head>
<body>
	<p><a href="{{ url }}">Click here</a> to be redirected.</p>
</body>
</html>
"""


def time_attr(value: datetime) -> str:
    """Format a timestamp for a ``datetime`` attribute."""
    return value.isoformat(timespec="seconds").replace("+00:00", "Z")


def first_paragraph_filter(value: str) -> Markup:
    return Markup(first_paragraph(str(value)))


class TemplateEngine:
    """Template lookup and rendering over a site's templates directory.

    Every ``.html`` file below the directory is a template, named by its
    path relative to the directory (``partials/nav.html``). The redirect
    template ``_redirect`` is always available.
    """

    def __init__(self, templates_dir: str | Path) -> None:
        """Initialize engine.

        Args:
            templates_dir: Directory holding the site's templates
        """
        self.templates_dir = Path(templates_dir)
        loaders: list[Any] = [DictLoader({REDIRECT_TEMPLATE: REDIRECT_HTML})]
        if self.templates_dir.is_dir():
            loaders.insert(0, FileSystemLoader(self.templates_dir))
        else:
            logger.warning("templates_dir_missing", templates_dir=str(self.templates_dir))

        self.environment = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=True,
            keep_trailing_newline=True,
        )
        self.environment.filters["first_paragraph"] = first_paragraph_filter
        self.environment.filters["time_attr"] = time_attr

        self._names = {
            name
            for name in self.environment.list_templates()
            if name.endswith(TEMPLATE_EXTENSION) or name == REDIRECT_TEMPLATE
        }

        logger.debug("templates_loaded", count=len(self._names))

    def register_helpers(self, helpers: dict[str, Callable[..., Any]]) -> None:
        """Expose callables to every template as globals."""
        self.environment.globals.update(helpers)

    def exists(self, name: str) -> bool:
        return name in self._names

    def render(self, name: str, data: TemplateData, writer: TextIO) -> None:
        """Render a template to ``writer``.

        The data's fields are available both at the top level of the
        template context (``{{ title }}``) and as ``page``.

        Raises:
            jinja2.TemplateNotFound: If the template does not exist
            jinja2.TemplateError: If the template fails to compile or render
        """
        template = self.environment.get_template(name)
        context: dict[str, Any] = {f.name: getattr(data, f.name) for f in fields(data)}
        context["page"] = data
        writer.write(template.render(context))
