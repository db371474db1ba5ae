"""High-level orchestration for producing a page asset report."""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import BeautifulSoup

from .classifier import classify_candidates
from .collector import collect_candidates
from .config import AnalyzerConfig
from .fetch import fetch_page
from .links import categorize_links
from .models import ImageInventory, PageReport
from .sizing import estimate_remote_sizes

logger = logging.getLogger("page_assets")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def classify_images(
    soup: BeautifulSoup, page_url: str, config: AnalyzerConfig
) -> ImageInventory:
    """Collect and classify image candidates without touching the network."""
    candidates = collect_candidates(soup)
    inventory = classify_candidates(candidates, page_url, config.image_extensions)
    logger.debug(
        "Classified %d candidate(s) into %d bucket(s)",
        len(candidates),
        len(inventory),
    )
    return inventory


async def analyze_images(
    html: str,
    page_url: str,
    config: Optional[AnalyzerConfig] = None,
    soup: Optional[BeautifulSoup] = None,
) -> ImageInventory:
    """Build a fresh image inventory for ``html`` served from ``page_url``.

    Remote sizes are probed after classification unless
    ``config.estimate_sizes`` is off.
    """
    config = config or AnalyzerConfig()
    if soup is None:
        soup = parse_html(html)
    inventory = classify_images(soup, page_url, config)
    if config.estimate_sizes:
        await estimate_remote_sizes(inventory, config)
    return inventory


async def analyze_html(
    html: str,
    page_url: str,
    config: Optional[AnalyzerConfig] = None,
    requested_url: Optional[str] = None,
) -> PageReport:
    """Produce the image and link report for HTML that is already in hand."""
    config = config or AnalyzerConfig()
    soup = parse_html(html)
    links = categorize_links(soup, page_url)
    images = await analyze_images(html, page_url, config, soup=soup)
    return PageReport(
        requested_url=requested_url or page_url,
        final_url=page_url,
        images=images,
        links=links,
    )


async def analyze_page(
    url: str, config: Optional[AnalyzerConfig] = None
) -> PageReport:
    """Fetch ``url`` and produce its asset report."""
    config = config or AnalyzerConfig()
    page = await fetch_page(url, config)
    report = await analyze_html(
        page.html, page.final_url, config, requested_url=page.requested_url
    )
    logger.info(
        "Analyzed %s: %d image(s), %d internal link(s), %d external link(s)",
        page.final_url,
        report.images.total_count,
        len(report.links.internal_links),
        len(report.links.external_links),
    )
    return report
