"""Preview metadata extraction from HTML pages."""

from typing import Optional

from bs4 import BeautifulSoup, Tag

from models import CrawlOptions, Response
from parsers.url import resolve_url

MAX_IMAGES = 10


def _meta(soup: BeautifulSoup, *names: str) -> Optional[str]:
    """Return the first non-empty content of <meta property|name=...> in the given order."""
    for name in names:
        tag = soup.find("meta", attrs={"property": name}) or soup.find("meta", attrs={"name": name})
        if isinstance(tag, Tag):
            content = (tag.get("content") or "").strip()
            if content:
                return content
    return None


def _link_href(soup: BeautifulSoup, rel: str) -> Optional[str]:
    for link in soup.find_all("link", href=True):
        rels = link.get("rel") or []
        if isinstance(rels, str):
            rels = rels.split()
        if rel in (r.lower() for r in rels):
            return link["href"]
    return None


def extract_title(soup: BeautifulSoup) -> Optional[str]:
    title = _meta(soup, "og:title", "twitter:title")
    if title:
        return title
    if soup.title and soup.title.string:
        return soup.title.string.strip() or None
    h1 = soup.find("h1")
    if h1:
        return h1.get_text(" ", strip=True) or None
    return None


def extract_description(soup: BeautifulSoup) -> Optional[str]:
    """
    Page description from meta tags, falling back to the first paragraph
    with some substance.
    """
    description = _meta(soup, "og:description", "twitter:description", "description")
    if description:
        return description
    for p in soup.find_all("p"):
        text = p.get_text(" ", strip=True)
        if len(text) >= 40:
            return text
    return None


def extract_images(soup: BeautifulSoup, base_url: str) -> list[str]:
    """Candidate preview images, meta tags first, then <img> tags in page order."""
    candidates = []
    for name in ("og:image", "og:image:url", "twitter:image", "twitter:image:src"):
        content = _meta(soup, name)
        if content:
            candidates.append(content)
    candidates.append(_link_href(soup, "image_src"))
    for img in soup.find_all("img"):
        candidates.append(img.get("src") or img.get("data-src"))

    images: list[str] = []
    for href in candidates:
        url = resolve_url(base_url, href)
        if url and url not in images:
            images.append(url)
        if len(images) >= MAX_IMAGES:
            break
    return images


def extract_icon(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    for rel in ("icon", "shortcut", "apple-touch-icon"):
        href = _link_href(soup, rel)
        if href:
            return resolve_url(base_url, href)
    return resolve_url(base_url, "/favicon.ico")


def extract_video(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    video = _meta(soup, "og:video:secure_url", "og:video:url", "og:video", "twitter:player")
    if video:
        return resolve_url(base_url, video)
    for tag in soup.find_all(["video", "iframe"]):
        src = tag.get("src")
        if not src and tag.name == "video":
            source = tag.find("source", src=True)
            src = source["src"] if source else None
        if src:
            return resolve_url(base_url, src)
    return None


def extract_canonical_url(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    return resolve_url(base_url, _link_href(soup, "canonical") or _meta(soup, "og:url"))


def build_response(url: str, final_url: str, soup: BeautifulSoup, options: CrawlOptions) -> Response:
    """Build a preview response containing only the parts selected by `options`."""
    fields: dict = {"url": url, "final_url": final_url}

    if options & CrawlOptions.TITLE:
        fields["title"] = extract_title(soup)
    if options & CrawlOptions.DESCRIPTION:
        fields["description"] = extract_description(soup)
    if options & CrawlOptions.IMAGES:
        images = extract_images(soup, final_url)
        fields["images"] = tuple(images)
        fields["image"] = images[0] if images else None
    if options & CrawlOptions.ICON:
        fields["icon"] = extract_icon(soup, final_url)
    if options & CrawlOptions.VIDEO:
        fields["video"] = extract_video(soup, final_url)
    if options & CrawlOptions.CANONICAL_URL:
        fields["canonical_url"] = extract_canonical_url(soup, final_url)

    return Response(**fields)
