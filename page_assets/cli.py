"""Command-line entry point for the page asset analyzer."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, List, Sequence

from .analyzer import analyze_html, analyze_page
from .config import AnalyzerConfig, DEFAULT_IMAGE_EXTENSIONS, normalize_extensions
from .fetch import PageFetchError
from .models import PageReport
from .utils import format_bytes

logger = logging.getLogger("page_assets.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("analyze", *argv)


def _add_analyze_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("urls", nargs="+", help="One or more page URLs to analyze")
    parser.add_argument(
        "--html-file",
        type=Path,
        default=None,
        help="Analyze this local HTML file instead of fetching; the URL is used as base",
    )
    parser.add_argument(
        "--render",
        action="store_true",
        help="Render pages in headless Chromium before analysis",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=15.0,
        help="Page fetch timeout in seconds",
    )
    parser.add_argument(
        "--probe-timeout",
        type=float,
        default=5.0,
        help="Timeout in seconds for each image size probe",
    )
    parser.add_argument(
        "--extensions",
        default=",".join(DEFAULT_IMAGE_EXTENSIONS),
        help="Comma separated list of known image extensions",
    )
    parser.add_argument(
        "--no-sizes",
        action="store_true",
        help="Skip remote size probes",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the JSON report to this file instead of STDOUT",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Inventory the images referenced by web pages, grouped by file type.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Report image types, counts and sizes for pages"
    )
    _add_analyze_arguments(analyze_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AnalyzerConfig:
    return AnalyzerConfig(
        image_extensions=normalize_extensions(args.extensions.split(",")),
        estimate_sizes=not args.no_sizes,
        probe_timeout=args.probe_timeout,
        fetch_timeout=args.timeout,
        render=args.render,
    )


async def _analyze_all(args: argparse.Namespace, config: AnalyzerConfig) -> List[PageReport]:
    reports: List[PageReport] = []
    if args.html_file:
        html = args.html_file.read_text(encoding="utf-8", errors="replace")
        for url in args.urls:
            reports.append(await analyze_html(html, url, config))
        return reports

    for url in args.urls:
        try:
            reports.append(await analyze_page(url, config))
        except PageFetchError as exc:
            logger.error("%s", exc)
    return reports


def _run_analyze(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = build_config(args)
    overall_start = time.perf_counter()
    reports = asyncio.run(_analyze_all(args, config))
    total_elapsed = time.perf_counter() - overall_start

    successes = len(reports)
    total_urls = len(args.urls)
    logger.info(
        "Finished in %.2fs (%d/%d succeeded, %d failed)",
        total_elapsed,
        successes,
        total_urls,
        total_urls - successes,
    )
    for report in reports:
        logger.debug(
            "%s -> %d image(s), %s",
            report.final_url,
            report.images.total_count,
            format_bytes(report.images.total_size),
        )

    payload = [report.to_dict() for report in reports]
    if len(payload) == 1:
        payload = payload[0]
    text = json.dumps(payload, indent=2)
    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info("Saved report to %s", args.output)
    else:
        sys.stdout.write(text + "\n")
        sys.stdout.flush()
    return 0 if successes == total_urls else 1


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    sys.exit(_run_analyze(args))


if __name__ == "__main__":
    main()
