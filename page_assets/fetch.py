"""Retrieve page HTML either over plain HTTP or through a headless browser."""

from __future__ import annotations

import asyncio
import logging

import requests
from playwright.async_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import AnalyzerConfig
from .models import FetchedPage
from .utils import is_http_url

logger = logging.getLogger("page_assets")


class PageFetchError(RuntimeError):
    """Raised when the page to analyze cannot be retrieved."""


def download_page(url: str, config: AnalyzerConfig) -> FetchedPage:
    """Fetch the raw HTML of ``url`` with ``requests``."""
    logger.info("Fetching %s", url)
    try:
        resp = requests.get(
            url,
            headers={"User-Agent": config.user_agent},
            timeout=config.fetch_timeout,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise PageFetchError(f"Failed to fetch {url}: {exc}") from exc
    return FetchedPage(requested_url=url, final_url=resp.url or url, html=resp.text)


async def render_page(url: str, config: AnalyzerConfig) -> FetchedPage:
    """Navigate to ``url`` using Playwright and return the rendered HTML."""
    try:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=True)
            try:
                page = await browser.new_page(user_agent=config.user_agent)
                page.set_default_navigation_timeout(config.navigation_timeout * 1000)
                logger.info("Loading %s", url)
                await page.goto(url, wait_until="networkidle")
                if config.wait_after_load:
                    await page.wait_for_timeout(int(config.wait_after_load * 1000))
                html = await page.content()
                final_url = page.url
            finally:
                await browser.close()
    except PlaywrightTimeoutError as exc:
        raise PageFetchError(f"Timeout while loading {url}: {exc}") from exc
    except PlaywrightError as exc:
        raise PageFetchError(f"Failed to load {url}: {exc}") from exc
    return FetchedPage(requested_url=url, final_url=final_url, html=html)


async def fetch_page(url: str, config: AnalyzerConfig) -> FetchedPage:
    """Fetch ``url`` the way ``config`` asks for."""
    if not is_http_url(url):
        raise PageFetchError(f"Not an http(s) URL: {url!r}")
    if config.render:
        return await render_page(url, config)
    return await asyncio.to_thread(download_page, url, config)
