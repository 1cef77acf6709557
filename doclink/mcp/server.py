"""MCP server implementation for Doclink."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from doclink.config import ResolverConfig
from doclink.core.exceptions import DoclinkError, ModelError
from doclink.core.models import Element
from doclink.core.session import DocSession

logger = logging.getLogger(__name__)

server = Server("doclink")

_MODEL_PROPERTY = {
    "type": "string",
    "description": "Path to the program model JSON file (default: $DOCLINK_MODEL)",
}


def _get_session(arguments: dict[str, Any]) -> DocSession:
    """Load the session for the model named by the arguments or the environment."""
    model = arguments.get("model") or os.getenv("DOCLINK_MODEL")
    if not model:
        raise ModelError("No program model given. Pass 'model' or set DOCLINK_MODEL.")
    path = Path(model)
    if not path.exists():
        raise ModelError(f"Program model not found: {path}")
    return DocSession.from_file(path, ResolverConfig.from_env())


def _element_to_dict(element: Element) -> dict[str, Any]:
    """Convert an Element to a JSON-serializable dict."""
    return {
        "name": element.name,
        "qualified_name": element.qualified_name,
        "kind": element.kind.value,
    }


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="doclink_resolve",
            description=(
                "Resolve a documentation reference such as 'pkg.Type#method(int)' to the "
                "element it names. Returns null when nothing matches."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "signature": {"type": "string", "description": "Reference to resolve"},
                    "context": {
                        "type": "string",
                        "description": "Element whose documentation holds the reference",
                    },
                    "model": _MODEL_PROPERTY,
                },
                "required": ["signature"],
            },
        ),
        Tool(
            name="doclink_order",
            description=(
                "List the ancestors of a type in the order they are searched for "
                "inherited documentation, nearest first."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "type": {"type": "string", "description": "Type reference"},
                    "model": _MODEL_PROPERTY,
                },
                "required": ["type"],
            },
        ),
        Tool(
            name="doclink_qualities",
            description=(
                "Report whether an element is excluded from documentation and whether it "
                "is deprecated, with the elements that cause implied deprecation."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "reference": {"type": "string", "description": "Element reference"},
                    "model": _MODEL_PROPERTY,
                },
                "required": ["reference"],
            },
        ),
        Tool(
            name="doclink_inherit",
            description=(
                "Find documentation an element inherits: its summary by default, or a "
                "parameter, return or throws fragment of an instance method."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "reference": {"type": "string", "description": "Type or method reference"},
                    "fragment": {
                        "type": "string",
                        "enum": ["summary", "param", "return", "throws", "body"],
                        "default": "summary",
                    },
                    "position": {
                        "type": "integer",
                        "description": "Parameter position for 'param', from 0",
                    },
                    "thrown": {
                        "type": "string",
                        "description": "Exception type for 'throws'",
                    },
                    "model": _MODEL_PROPERTY,
                },
                "required": ["reference"],
            },
        ),
        Tool(
            name="doclink_stats",
            description="Summarize a program model, its classification and diagnostics.",
            inputSchema={
                "type": "object",
                "properties": {"model": _MODEL_PROPERTY},
            },
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "doclink_resolve":
            result = _handle_resolve(arguments)
        elif name == "doclink_order":
            result = _handle_order(arguments)
        elif name == "doclink_qualities":
            result = _handle_qualities(arguments)
        elif name == "doclink_inherit":
            result = _handle_inherit(arguments)
        elif name == "doclink_stats":
            result = _handle_stats(arguments)
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except DoclinkError as e:
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]
    except (KeyError, TypeError) as e:
        logger.debug("Bad arguments for %s: %s", name, e)
        return [TextContent(type="text", text=json.dumps({"error": f"Bad arguments: {e}"}))]


def _handle_resolve(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle doclink_resolve tool."""
    session = _get_session(arguments)
    context = arguments.get("context")
    ctx = session.require(context) if context else None
    found = session.resolve_signature(ctx, arguments["signature"])
    return {
        "element": _element_to_dict(found) if found else None,
        "diagnostics": [d.to_dict() for d in session.diagnostics.records()],
    }


def _handle_order(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle doclink_order tool."""
    session = _get_session(arguments)
    t = session.require_type(arguments["type"])
    return {
        "type": _element_to_dict(t),
        "order": [_element_to_dict(a) for a in session.get_inheritance_order(t)],
    }


def _handle_qualities(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle doclink_qualities tool."""
    session = _get_session(arguments)
    element = session.require(arguments["reference"])
    q = session.get_qualities(element)
    if q is None:
        return {"element": _element_to_dict(element), "classified": False}
    return {
        "element": _element_to_dict(element),
        "classified": True,
        "excluded": q.excluded,
        "deprecation": q.deprecation.name.lower(),
        "causes": [_element_to_dict(c) for c in sorted(q.causes, key=lambda c: c.qualified_name)],
    }


def _handle_inherit(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle doclink_inherit tool."""
    session = _get_session(arguments)
    element = session.require(arguments["reference"])
    fragment = arguments.get("fragment", "summary")
    docs = session.docs

    if fragment == "param":
        found = docs.find_param(element, int(arguments["position"]))
    elif fragment == "return":
        found = docs.find_return(element)
    elif fragment == "throws":
        found = docs.find_throws(element, session.require_type(arguments["thrown"]))
    elif fragment == "body":
        found = docs.find_body(element)
    elif fragment == "summary":
        found = docs.find_inherited_summary(element)
    else:
        return {"error": f"Unknown fragment: {fragment}"}

    return {
        "element": _element_to_dict(element),
        "source": _element_to_dict(found.source) if found else None,
        "text": found.text if found else None,
    }


def _handle_stats(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle doclink_stats tool."""
    session = _get_session(arguments)
    classification = session.classification
    session.undocumented_report()
    return {
        "modules": len(session.universe.modules),
        "packages": len(session.universe.packages),
        "types": len(session.universe.types),
        "classified": len(classification.qualities),
        "excluded": len(classification.excluded_elements),
        "deprecated": len(classification.deprecated_elements),
        "diagnostics": session.diagnostics.stats().to_dict(),
    }


async def serve() -> None:
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
