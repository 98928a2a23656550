"""Parse roadmap resource strings into displayable links."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote_plus

SEARCH_URL = "https://www.google.com/search?q="


@dataclass(frozen=True)
class ResourceLink:
    title: str
    url: str
    is_search: bool = False


def _is_url(text: str) -> bool:
    lowered = text.lower()
    return lowered.startswith(("http://", "https://", "www."))


def _normalize_url(text: str) -> str:
    return f"https://{text}" if text.lower().startswith("www.") else text


def parse_resource(resource: str) -> ResourceLink:
    """Parse ``"Title|URL"``, a bare URL, or plain text.

    - ``"Title|URL"`` splits on the first pipe.
    - A bare ``http(s)://`` or ``www.`` string becomes an unlabeled link.
    - Anything else becomes a web search for the text.
    """
    text = resource.strip()
    title, sep, url = text.partition("|")
    title, url = title.strip(), url.strip()

    if sep and url:
        if _is_url(url):
            return ResourceLink(title=title or url, url=_normalize_url(url))
        # Pipe without a usable URL: search for the label.
        return ResourceLink(title=title or url, url=SEARCH_URL + quote_plus(title or url), is_search=True)

    text = title
    if _is_url(text):
        return ResourceLink(title=text, url=_normalize_url(text))
    return ResourceLink(title=text, url=SEARCH_URL + quote_plus(text), is_search=True)
