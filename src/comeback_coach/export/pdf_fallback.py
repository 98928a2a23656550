"""Fallback PDF renderer using fpdf2 (pure Python, no system deps)."""

from __future__ import annotations

import html
import logging
import re
from io import BytesIO
from pathlib import Path

from fpdf import FPDF

logger = logging.getLogger(__name__)

# Unicode TTF fonts commonly present on macOS, Linux and Windows
_UNICODE_FONT_PATHS = [
    "/Library/Fonts/Arial Unicode.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "C:/Windows/Fonts/arial.ttf",
]

_HEADING_SIZES = {"h1": (18, 10), "h2": (13, 8), "h3": (11, 7)}


def _find_unicode_font() -> str | None:
    for path in _UNICODE_FONT_PATHS:
        if Path(path).exists():
            return path
    return None


def html_to_pdf_fpdf2(html_content: str) -> bytes:
    """Render the simple roadmap HTML (headings, paragraphs, lists) with fpdf2."""
    body_match = re.search(r"<body>(.*?)</body>", html_content, re.DOTALL)
    body = body_match.group(1) if body_match else html_content

    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=20)
    pdf.add_page()

    font_name = "Helvetica"
    font_path = _find_unicode_font()
    if font_path:
        try:
            pdf.add_font("RoadmapFont", "", font_path)
            font_name = "RoadmapFont"
        except Exception:
            logger.debug("Failed to load font %s", font_path)

    pdf.set_font(font_name, size=10)

    for line_type, text in _parse_html_to_lines(body):
        safe_text = _safe_text(text, pdf)
        try:
            if line_type in _HEADING_SIZES:
                size, height = _HEADING_SIZES[line_type]
                pdf.ln(3 if line_type != "h1" else 0)
                pdf.set_font_size(size)
                pdf.multi_cell(0, height, safe_text, new_x="LMARGIN", new_y="NEXT")
                if line_type == "h1":
                    pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
                pdf.ln(2)
                pdf.set_font_size(10)
            elif line_type == "bullet":
                pdf.multi_cell(0, 6, f"  - {safe_text}", new_x="LMARGIN", new_y="NEXT")
            elif line_type == "text" and safe_text.strip():
                pdf.multi_cell(0, 6, safe_text, new_x="LMARGIN", new_y="NEXT")
            elif line_type == "break":
                pdf.ln(3)
        except Exception:
            logger.debug("Failed to render line: %s %s", line_type, safe_text[:30])

    buf = BytesIO()
    pdf.output(buf)
    return buf.getvalue()


def _safe_text(text: str, pdf: FPDF) -> str:
    """Replace characters the built-in latin-1 fonts cannot encode."""
    if pdf.is_ttf_font:
        return text
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _parse_html_to_lines(body_html: str) -> list[tuple[str, str]]:
    """Parse simple HTML into (type, text) pairs."""
    lines: list[tuple[str, str]] = []
    parts = re.split(r"(</?(?:h[1-3]|p|li|ul|ol|br\s*/?)>)", body_html)
    current_tag = "text"
    for part in parts:
        part = part.strip()
        if not part:
            continue
        tag_match = re.match(r"<(/?)(h[1-3]|p|li|ul|ol|br\s*/?)>", part)
        if tag_match:
            closing = tag_match.group(1) == "/"
            tag = tag_match.group(2).rstrip("/").strip()
            if closing:
                if tag in ("ul", "ol"):
                    lines.append(("break", ""))
                current_tag = "text"
            elif tag in ("h1", "h2", "h3"):
                current_tag = tag
            elif tag == "li":
                current_tag = "bullet"
            elif tag.startswith("br"):
                lines.append(("break", ""))
            else:
                current_tag = "text"
        else:
            text = _strip_html(part)
            if text:
                lines.append((current_tag, text))
    return lines


def _strip_html(text: str) -> str:
    """Remove HTML tags and decode entities."""
    text = re.sub(r"<[^>]+>", "", text)
    return html.unescape(text).strip()
