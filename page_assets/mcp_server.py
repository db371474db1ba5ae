"""MCP server exposing the page asset analyzer as a tool."""

from __future__ import annotations

import logging
from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from .analyzer import analyze_page
from .config import AnalyzerConfig

logger = logging.getLogger("page_assets.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="page-assets")


@mcp.tool()
async def analyze_url(
    url: str,
) -> Dict[str, Any]:
    """Fetch a web page and report its images by type plus its anchor links."""
    report = await analyze_page(url, AnalyzerConfig())
    return report.to_dict()


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
