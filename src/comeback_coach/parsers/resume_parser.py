import re
from pathlib import Path

from comeback_coach.models.payload import AnalysisInput, FilePayload, TextInput

ALLOWED_SUFFIXES = (".pdf", ".docx", ".doc", ".txt", ".md")

UNSUPPORTED_MESSAGE = "Please upload a PDF, Word document, or text file."
EMPTY_MESSAGE = "Please provide your resume information."


def load_resume_input(file_path: str | Path, inline_files: bool = True) -> AnalysisInput:
    """Turn an uploaded resume into pipeline input.

    PDFs are passed through as a ``FilePayload`` so the model reads the
    document layout; with ``inline_files=False`` they are parsed locally.
    Everything else becomes cleaned text.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix not in ALLOWED_SUFFIXES:
        raise ValueError(UNSUPPORTED_MESSAGE)

    if suffix == ".pdf" and inline_files:
        data = path.read_bytes()
        if not data:
            raise ValueError(EMPTY_MESSAGE)
        return FilePayload(mime_type="application/pdf", data=data, filename=path.name)

    return text_input(parse_resume(path))


def text_input(text: str) -> TextInput:
    """Wrap pasted resume text, rejecting blank input."""
    if not text or not text.strip():
        raise ValueError(EMPTY_MESSAGE)
    return TextInput(text.strip())


def parse_resume(file_path: str | Path) -> str:
    """Parse a resume file (PDF, DOCX, TXT, MD) and return clean plain text."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return clean_text(_parse_pdf(path))
    elif suffix in (".docx", ".doc"):
        return clean_text(_parse_docx(path))
    elif suffix in (".txt", ".md"):
        return clean_text(path.read_text(encoding="utf-8"))
    else:
        raise ValueError(UNSUPPORTED_MESSAGE)


def clean_text(text: str) -> str:
    """Clean copy-paste and export artifacts out of resume text.

    Handles: unicode artifacts, bullet styles, repeated spaces and blank lines.
    """
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)

    # ●, •, ◦, ◆, ■, ▪, ★, ○ -> "- "
    text = re.sub(r"^(\s*)[●•◦◆■▪★○]\s*", r"\1- ", text, flags=re.MULTILINE)

    lines = []
    for line in text.splitlines():
        stripped = line.lstrip()
        indent = " " * len(line[: len(line) - len(stripped)].replace("\t", "    "))
        stripped = re.sub(r"[ \t]{2,}", " ", stripped).rstrip()
        lines.append(f"{indent}{stripped}" if stripped else "")
    text = "\n".join(lines)

    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _parse_pdf(path: Path) -> str:
    import fitz  # pymupdf

    doc = fitz.open(str(path))
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def _parse_docx(path: Path) -> str:
    from docx import Document

    doc = Document(str(path))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
