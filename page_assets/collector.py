"""Candidate image discovery over a parsed HTML document.

Each strategy returns the raw attribute or CSS values it finds, without
resolving, filtering or de-duplicating them:

- ``<img>`` tags (src, srcset and lazy-load placeholders)
- ``<picture>`` sources
- CSS ``background-image`` in inline styles and ``<style>`` blocks
- ``<image>`` elements inside inline SVG
- favicons, Open Graph and Twitter card images
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Protocol

CSS_URL_PATTERN = re.compile(r"""url\(\s*['"]?(.*?)['"]?\s*\)""", re.IGNORECASE)

LAZY_SRC_ATTRS = ("data-src", "data-lazy-src", "data-original")
LAZY_SRCSET_ATTRS = ("data-srcset",)

SOCIAL_IMAGE_PROPERTIES = (
    "og:image",
    "og:image:url",
    "og:image:secure_url",
    "twitter:image",
    "twitter:image:src",
)


class Selectable(Protocol):
    """Anything that can run a CSS selector over a document tree.

    BeautifulSoup satisfies this directly; the returned nodes only need
    ``get(attribute)`` and ``get_text()``.
    """

    def select(self, selector: str) -> Iterable[Any]:
        ...


def _attr(node: Any, name: str) -> Optional[str]:
    value = node.get(name)
    if isinstance(value, (list, tuple)):
        value = " ".join(value)
    if not value:
        return None
    return value


def parse_srcset(srcset: Optional[str]) -> List[str]:
    """Return the URL part of every comma separated srcset descriptor."""
    if not srcset:
        return []
    urls = []
    for part in srcset.split(","):
        fields = part.split()
        if fields:
            urls.append(fields[0])
    return urls


def find_img_tag_sources(document: Selectable) -> List[str]:
    sources: List[str] = []
    for img in document.select("img"):
        src = _attr(img, "src")
        if src:
            sources.append(src)
        sources.extend(parse_srcset(_attr(img, "srcset")))
        for name in LAZY_SRC_ATTRS:
            lazy = _attr(img, name)
            if lazy:
                sources.append(lazy)
        for name in LAZY_SRCSET_ATTRS:
            sources.extend(parse_srcset(_attr(img, name)))
    return sources


def find_picture_sources(document: Selectable) -> List[str]:
    sources: List[str] = []
    for source in document.select("picture source"):
        sources.extend(parse_srcset(_attr(source, "srcset")))
    return sources


def _css_urls(text: str) -> List[str]:
    return [match for match in CSS_URL_PATTERN.findall(text) if match]


def find_background_image_sources(document: Selectable) -> List[str]:
    """Collect ``url(...)`` values from inline styles and ``<style>`` blocks.

    Inline styles are only considered when they mention ``background-image``;
    stylesheet text is scanned as a whole.
    """
    sources: List[str] = []
    for node in document.select("[style]"):
        style = _attr(node, "style")
        if style and "background-image" in style:
            sources.extend(_css_urls(style))
    for block in document.select("style"):
        text = block.get_text()
        if text:
            sources.extend(_css_urls(text))
    return sources


def find_svg_image_sources(document: Selectable) -> List[str]:
    sources: List[str] = []
    for image in document.select("svg image"):
        href = _attr(image, "href") or _attr(image, "xlink:href")
        if href:
            sources.append(href)
    return sources


def find_link_and_meta_sources(document: Selectable) -> List[str]:
    sources: List[str] = []
    for link in document.select('link[rel*="icon"]'):
        href = _attr(link, "href")
        if href:
            sources.append(href)
    for name in SOCIAL_IMAGE_PROPERTIES:
        selector = f'meta[property="{name}"], meta[name="{name}"]'
        for meta in document.select(selector):
            content = _attr(meta, "content")
            if content:
                sources.append(content)
    return sources


STRATEGIES = (
    find_img_tag_sources,
    find_picture_sources,
    find_background_image_sources,
    find_svg_image_sources,
    find_link_and_meta_sources,
)


def collect_candidates(document: Selectable) -> List[str]:
    """Run every discovery strategy and concatenate their raw results."""
    candidates: List[str] = []
    for strategy in STRATEGIES:
        candidates.extend(strategy(document))
    return candidates
