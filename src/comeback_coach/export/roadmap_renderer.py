from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import markdown
from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from comeback_coach.models.analysis import Roadmap, RoadmapWeek
from comeback_coach.parsers.resource_parser import parse_resource

logger = logging.getLogger(__name__)

CSS_THEMES_DIR = Path(__file__).parent / "css_themes"
BASE_TEMPLATE_DIR = Path(__file__).parent

AVAILABLE_THEMES = ("professional", "modern", "minimal")

DEFAULT_TITLE = "Your Learning Roadmap"


def render_roadmap_markdown(
    roadmap: Roadmap,
    title: str = DEFAULT_TITLE,
    generated: datetime | None = None,
) -> str:
    """Render a roadmap as a printable Markdown document."""
    generated = generated or datetime.now()
    lines = [f"# {title}", ""]
    if roadmap.overall_goal:
        lines.append(f"**Goal:** {roadmap.overall_goal}")
        lines.append("")
    lines.append(
        f"**Estimated time:** {roadmap.estimated_hours:g} hours | "
        f"**Duration:** {len(roadmap.weeks)} weeks"
    )
    lines.append("")
    if roadmap.restored_from:
        lines.append(f"*Restored from {roadmap.restored_from}*")
        lines.append("")
    lines.append(f"*Generated on {generated:%B %d, %Y}*")

    for week in roadmap.weeks:
        lines.append("")
        lines.extend(_render_week(week))

    return "\n".join(lines).rstrip() + "\n"


def _render_week(week: RoadmapWeek) -> list[str]:
    lines = [f"## Week {week.week}: {week.title}"]
    sections = (
        ("Goals", week.goals),
        ("Topics", week.topics),
        ("Resources", [_resource_markdown(r) for r in week.resources]),
        ("Projects", week.projects),
    )
    for heading, items in sections:
        if not items:
            continue
        lines.append("")
        lines.append(f"### {heading}")
        lines.append("")
        lines.extend(f"- {item}" for item in items)
    return lines


def _resource_markdown(resource: str) -> str:
    link = parse_resource(resource)
    suffix = " (search)" if link.is_search else ""
    return f"[{link.title}]({link.url}){suffix}"


def render_pdf(
    roadmap: Roadmap,
    theme: str = "professional",
    title: str = DEFAULT_TITLE,
) -> bytes:
    """Convert a roadmap to PDF bytes."""
    html = render_html_preview(roadmap, theme, title)
    return _html_to_pdf(html)


def render_html_preview(
    roadmap: Roadmap,
    theme: str = "professional",
    title: str = DEFAULT_TITLE,
) -> str:
    """Convert a roadmap to a themed HTML string (for preview)."""
    if theme not in AVAILABLE_THEMES:
        logger.debug("Unknown theme %r, using professional", theme)
        theme = "professional"
    return _md_to_styled_html(render_roadmap_markdown(roadmap, title), theme, title)


def _md_to_styled_html(md_text: str, theme: str, title: str) -> str:
    html_body = markdown.markdown(md_text, extensions=["tables", "sane_lists"])
    css_path = CSS_THEMES_DIR / f"{theme}.css"
    css = css_path.read_text(encoding="utf-8") if css_path.exists() else ""
    env = Environment(
        loader=FileSystemLoader(str(BASE_TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template("base.html")
    return template.render(title=title, css=Markup(css), body=Markup(html_body))


def _html_to_pdf(html: str) -> bytes:
    """Convert HTML string to PDF bytes using WeasyPrint, with fpdf2 fallback."""
    try:
        from weasyprint import HTML
        return HTML(string=html).write_pdf()
    except (ImportError, OSError):
        logger.warning("WeasyPrint not available, using fpdf2 fallback")
        from comeback_coach.export.pdf_fallback import html_to_pdf_fpdf2
        return html_to_pdf_fpdf2(html)
