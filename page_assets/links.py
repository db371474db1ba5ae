"""Anchor link extraction and internal/external categorization."""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlsplit

from .collector import Selectable
from .models import LinkDetails
from .utils import HTTP_SCHEMES

logger = logging.getLogger("page_assets")


def categorize_links(document: Selectable, page_url: str) -> LinkDetails:
    """Split every ``<a href>`` on the page by whether it stays on the host."""
    details = LinkDetails()
    page_host = urlsplit(page_url).hostname

    for anchor in document.select("a[href]"):
        href = anchor.get("href")
        if not href:
            continue
        try:
            absolute = urljoin(page_url, href.strip())
            parts = urlsplit(absolute)
            host = parts.hostname
        except ValueError as exc:
            logger.warning(
                "Could not parse or resolve URL %s (base: %s): %s", href, page_url, exc
            )
            continue

        if parts.scheme.lower() not in HTTP_SCHEMES:
            continue
        if href.strip().startswith("#"):
            continue

        target = details.internal_links if host == page_host else details.external_links
        if absolute not in target:
            target.append(absolute)
    return details
