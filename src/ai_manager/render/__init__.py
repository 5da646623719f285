"""Template rendering and agents.md assembly."""

from ai_manager.render.agents import AgentsAssemblyInput, build_agents_markdown
from ai_manager.render.renderer import render_template, render_template_file

__all__ = [
    "AgentsAssemblyInput",
    "build_agents_markdown",
    "render_template",
    "render_template_file",
]
