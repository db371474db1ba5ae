"""Resolve raw image candidates and assign them to type buckets."""

from __future__ import annotations

import base64
import binascii
import logging
import posixpath
import re
from typing import Iterable, List, Optional, Sequence
from urllib.parse import parse_qsl, unquote, urljoin, urlsplit

from requests.utils import requote_uri

from .config import ERROR_BUCKET, UNKNOWN_BUCKET
from .models import Classification, ImageInventory
from .utils import HTTP_SCHEMES

logger = logging.getLogger("page_assets")

DATA_IMAGE_PREFIX = "data:image/"
BASE64_DATA_PATTERN = re.compile(
    r"^data:image/([a-z0-9.+-]+)(?:;[^,;]*)*;base64,(.*)$",
    re.IGNORECASE | re.DOTALL,
)
GENERIC_DATA_PATTERN = re.compile(
    r"^data:image/([a-z0-9.+-]+)(?:;[^,]*)?,(.*)$", re.IGNORECASE | re.DOTALL
)
SVG_SUBTYPE = "svg+xml"
BASE64_NOISE_PATTERN = re.compile(r"[^A-Za-z0-9+/]")


def is_data_image(candidate: str) -> bool:
    return candidate[: len(DATA_IMAGE_PREFIX)].lower() == DATA_IMAGE_PREFIX


def resolve_url(candidate: str, base_url: str) -> str:
    """Resolve ``candidate`` against ``base_url``.

    Raises ``ValueError`` when the result cannot be parsed as a URL: an
    unbalanced IPv6 host, an out of range port, or an http(s) URL without a
    host.
    """
    resolved = urljoin(base_url, candidate.strip())
    parts = urlsplit(resolved)
    _ = parts.port  # raises ValueError for a malformed port
    if parts.scheme.lower() in HTTP_SCHEMES:
        if not parts.hostname:
            raise ValueError(f"URL has no host: {resolved!r}")
        resolved = requote_uri(resolved)
    return resolved


def _suffix(value: str) -> str:
    return posixpath.splitext(value)[1].lower()


def bucket_for_url(url: str, extensions: Sequence[str]) -> str:
    """Pick a bucket from the path suffix, falling back to query values.

    Image CDNs often serve files from paths like ``/render?file=photo.png``,
    so the first query value ending in a known extension wins when the path
    itself has none.
    """
    parts = urlsplit(url)
    extension = _suffix(parts.path)
    if extension in extensions:
        return extension
    for _, value in parse_qsl(parts.query, keep_blank_values=True):
        extension = _suffix(value)
        if extension in extensions:
            return extension
    return UNKNOWN_BUCKET


def bucket_for_subtype(subtype: str, extensions: Sequence[str]) -> str:
    """Map a MIME subtype such as ``svg+xml`` to ``.svg``."""
    extension = "." + subtype.split("+", 1)[0].lower()
    if extension in extensions:
        return extension
    return UNKNOWN_BUCKET


def decode_base64_payload(payload: str) -> bytes:
    """Decode base64 the forgiving way browsers do.

    Characters outside the base64 alphabet are dropped and missing ``=``
    padding is restored. Raises ``binascii.Error`` when the payload still
    cannot be decoded.
    """
    cleaned = BASE64_NOISE_PATTERN.sub("", payload)
    cleaned += "=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned, validate=True)


def classify_data_url(candidate: str, extensions: Sequence[str]) -> Classification:
    """Size and bucket an embedded ``data:image/...`` reference."""
    match = BASE64_DATA_PATTERN.match(candidate)
    if match:
        subtype, payload = match.groups()
        try:
            decoded = decode_base64_payload(payload)
        except (binascii.Error, ValueError) as exc:
            logger.debug("Undecodable base64 image data (%s)", exc)
            return Classification(ERROR_BUCKET, candidate)
        return Classification(
            bucket_for_subtype(subtype, extensions), candidate, len(decoded)
        )

    match = GENERIC_DATA_PATTERN.match(candidate)
    if match:
        subtype, payload = match.groups()
        if subtype.lower() == SVG_SUBTYPE:
            payload = unquote(payload)
        return Classification(
            bucket_for_subtype(subtype, extensions),
            candidate,
            len(payload.encode("utf-8")),
        )

    return Classification(UNKNOWN_BUCKET, candidate)


def classify_candidate(
    candidate: str, base_url: str, extensions: Sequence[str]
) -> Classification:
    """Classify one raw candidate string found on the page at ``base_url``."""
    if is_data_image(candidate):
        return classify_data_url(candidate, extensions)

    try:
        resolved = resolve_url(candidate, base_url)
    except ValueError as exc:
        logger.debug("Could not resolve %r against %s: %s", candidate, base_url, exc)
        return Classification(ERROR_BUCKET, candidate)

    if urlsplit(resolved).scheme.lower() not in HTTP_SCHEMES:
        return Classification(UNKNOWN_BUCKET, resolved)
    return Classification(bucket_for_url(resolved, extensions), resolved)


def unique_candidates(candidates: Iterable[Optional[str]]) -> List[str]:
    """Drop empty values and exact duplicates, keeping first-seen order."""
    return list(dict.fromkeys(c for c in candidates if c))


def classify_candidates(
    candidates: Iterable[Optional[str]],
    base_url: str,
    extensions: Sequence[str],
    inventory: Optional[ImageInventory] = None,
) -> ImageInventory:
    """Classify every unique candidate into ``inventory``.

    ``count`` grows once per unique raw candidate; a resolved source reached
    through two different raw strings is counted twice but listed once.
    """
    if inventory is None:
        inventory = ImageInventory()
    for candidate in unique_candidates(candidates):
        result = classify_candidate(candidate, base_url, extensions)
        inventory.record(result.bucket, result.source, result.size)
    return inventory
