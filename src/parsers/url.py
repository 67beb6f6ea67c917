"""Finding and resolving URLs in free text."""

import re
from typing import Optional
from urllib.parse import urljoin

# http(s) links, or bare www. hosts
_URL_RE = re.compile(r"(?<![\w.])(?:https?://|www\.)[^\s<>\"']+", re.IGNORECASE)
_TRAILING_PUNCT = ".,;:!?)]}'\""


def extract_url(text: str) -> Optional[str]:
    """
    Return the first URL found in `text`, or None.

    Bare `www.` hosts get an https scheme. Trailing punctuation is dropped,
    except a closing parenthesis that balances one inside the URL.
    """
    match = _URL_RE.search(text)
    if not match:
        return None

    url = match.group(0)
    while url and url[-1] in _TRAILING_PUNCT:
        if url[-1] == ")" and url.count("(") >= url.count(")"):
            break
        url = url[:-1]

    if url.lower().startswith("www."):
        url = "https://" + url
    return url


def resolve_url(base: str, href: Optional[str]) -> Optional[str]:
    """Resolve `href` against `base`. Returns None for empty or data: links."""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("data:", "javascript:")):
        return None
    if href.startswith("//"):
        scheme = base.split(":", 1)[0] if ":" in base else "https"
        return f"{scheme}:{href}"
    return urljoin(base, href)
