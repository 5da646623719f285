"""Jinja2 template rendering for skill, harness and agents templates."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import jinja2

from ai_manager.core.errors import TemplateError

TemplateContext = dict[str, Any]


def _environment() -> jinja2.Environment:
    # Raw substitution: output is Markdown/JSON, not HTML
    return jinja2.Environment(autoescape=False, keep_trailing_newline=True)


def render_template(source: str, context: TemplateContext, name: str = "<string>") -> str:
    """Render template *source* against *context*."""
    env = _environment()
    try:
        template = env.from_string(source)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(name, exc.message or str(exc), exc.lineno) from exc
    return template.render(**context)


def render_template_file(template_path: str | Path, context: TemplateContext) -> str:
    """Read *template_path* once and render it.

    A missing file raises ``FileNotFoundError``; a syntax error raises
    :class:`TemplateError`.
    """
    path = Path(template_path)
    source = path.read_text(encoding="utf-8")
    return render_template(source, context, name=str(path))


async def render_template_file_async(
    template_path: str | Path, context: TemplateContext,
) -> str:
    """Render on a worker thread so independent renders can overlap."""
    return await asyncio.to_thread(render_template_file, template_path, context)
