"""
MCP server for Doclink.

Exposes reference resolution and inherited documentation to LLMs via the
Model Context Protocol.

Tools:
    - doclink_resolve: Resolve a reference to an element
    - doclink_order: List the ancestors a type inherits docs from
    - doclink_qualities: Report exclusion and deprecation of an element
    - doclink_inherit: Find documentation an element inherits
    - doclink_stats: Summarize a model and its diagnostics

Usage:
    Install: pip install doclink
    Run: DOCLINK_MODEL=model.json doclink-mcp
"""

import asyncio

from doclink.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
