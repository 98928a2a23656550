"""Roadmap export: Markdown, themed HTML and PDF."""
from comeback_coach.export.roadmap_renderer import (
    AVAILABLE_THEMES,
    render_html_preview,
    render_pdf,
    render_roadmap_markdown,
)

__all__ = ["render_roadmap_markdown", "render_pdf", "render_html_preview", "AVAILABLE_THEMES"]
