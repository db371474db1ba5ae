"""Best-effort remote size estimation using HEAD requests."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

import requests

from .config import AnalyzerConfig
from .models import ImageInventory
from .utils import is_http_url

logger = logging.getLogger("page_assets")


def probe_content_length(url: str, config: AnalyzerConfig) -> Optional[int]:
    """Return the ``Content-Length`` a HEAD request reports for ``url``.

    Any failure is logged and reported as ``None``.
    """
    try:
        resp = requests.head(
            url,
            headers={"User-Agent": config.user_agent},
            timeout=config.probe_timeout,
            allow_redirects=True,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Failed to probe image %s: %s", url, exc)
        return None

    header = resp.headers.get("Content-Length")
    if header is None:
        logger.warning("Skipping %s: no Content-Length header", url)
        return None
    try:
        size = int(header.strip())
    except ValueError:
        logger.warning("Skipping %s: invalid Content-Length %r", url, header)
        return None
    if size < 0:
        logger.warning("Skipping %s: negative Content-Length %r", url, header)
        return None
    return size


def probe_targets(
    inventory: ImageInventory, extensions: Sequence[str]
) -> List[Tuple[str, str]]:
    """List ``(bucket, url)`` pairs worth probing.

    Synthetic buckets and embedded data are skipped.
    """
    targets: List[Tuple[str, str]] = []
    for bucket, detail in inventory.items():
        if bucket not in extensions:
            continue
        for source in detail.sources:
            if is_http_url(source):
                targets.append((bucket, source))
    return targets


async def estimate_remote_sizes(
    inventory: ImageInventory, config: AnalyzerConfig
) -> int:
    """Probe every linked image concurrently and add the reported sizes.

    All probes run to completion before any size is applied, so buckets are
    only updated from this coroutine. Returns the number of probes that
    yielded a size.
    """
    targets = probe_targets(inventory, config.image_extensions)
    if not targets:
        return 0

    logger.info("Probing %d image(s) for size", len(targets))
    loop = asyncio.get_running_loop()
    # One worker per probe so every request is in flight at once.
    with ThreadPoolExecutor(max_workers=len(targets)) as pool:
        results = await asyncio.gather(
            *(
                loop.run_in_executor(pool, probe_content_length, url, config)
                for _, url in targets
            ),
            return_exceptions=True,
        )

    sized = 0
    for (bucket, url), result in zip(targets, results):
        if isinstance(result, BaseException):
            logger.warning("Unexpected error probing %s: %s", url, result)
            continue
        if result is None:
            continue
        inventory.add_size(bucket, result)
        sized += 1
    logger.debug("Sized %d/%d probed image(s)", sized, len(targets))
    return sized
