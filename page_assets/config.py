"""Configuration objects and constants for the page asset analyzer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

DEFAULT_IMAGE_EXTENSIONS: Tuple[str, ...] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".webp",
    ".svg",
    ".ico",
    ".avif",
    ".tiff",
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

UNKNOWN_BUCKET = ".unknown"
ERROR_BUCKET = ".errorProcessingUrl"


def normalize_extensions(values: Iterable[str]) -> Tuple[str, ...]:
    """Lowercase extensions and make sure each one starts with a dot."""
    normalized = []
    for value in values:
        value = value.strip().lower()
        if not value:
            continue
        if not value.startswith("."):
            value = "." + value
        if value not in normalized:
            normalized.append(value)
    return tuple(normalized)


@dataclass
class AnalyzerConfig:
    """Top-level settings that control fetching, classification and sizing."""

    image_extensions: Tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS
    estimate_sizes: bool = True
    probe_timeout: float = 5.0
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout: float = 15.0
    render: bool = False
    wait_after_load: float = 1.0
    navigation_timeout: float = 30.0
