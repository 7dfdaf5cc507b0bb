"""MCP server: memkeep — categorized memories over stdio.

Protocol: JSON-RPC 2.0 over stdio (NDJSON). stdout carries protocol messages
only; all logging goes to stderr and the log file.

Usage:
  python -m memkeep serve
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import sys
from typing import Any

from memkeep import __version__
from memkeep.instructions import build_instructions
from memkeep.memory.store import MemoryStore
from memkeep.tools.memory_tools import TOOLS, ToolResult, get_memory_tools

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────

SERVER_NAME = "memkeep"
PROTOCOL_VERSION = "2024-11-05"

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# ── JSON-RPC 2.0 helpers ─────────────────────────────────────


def jsonrpc_result(req_id, result):
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def jsonrpc_error(req_id, code, message):
    return {"jsonrpc": "2.0", "id": req_id, "error": {"code": code, "message": message}}


class MemoryServer:
    """Dispatches JSON-RPC requests to the memory tools."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store
        self.tools = get_memory_tools(store)

    # ── Request handler ──────────────────────────────────────

    async def handle_request(self, req: dict) -> dict | None:
        req_id = req.get("id")
        method = req.get("method", "")

        # Notifications (no id) — no response
        if req_id is None:
            if method == "notifications/initialized":
                logger.info("Client initialized")
            return None

        if method == "initialize":
            return jsonrpc_result(req_id, {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": __version__},
                "instructions": build_instructions(self.store),
            })

        if method == "ping":
            return jsonrpc_result(req_id, {})

        if method == "tools/list":
            return jsonrpc_result(req_id, {"tools": TOOLS})

        if method == "tools/call":
            params = req.get("params") or {}
            args = params.get("arguments") or {}
            if not isinstance(args, dict):
                return jsonrpc_error(req_id, INVALID_PARAMS, "arguments must be an object")
            return jsonrpc_result(req_id, self.call_tool(params.get("name", ""), args).to_dict())

        return jsonrpc_error(req_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    def call_tool(self, name: str, args: dict[str, Any]) -> ToolResult:
        tool = self.tools.get(name)
        if tool is None:
            return ToolResult(f"Unknown tool: {name}", is_error=True)
        try:
            inspect.signature(tool).bind(**args)
        except TypeError as e:
            logger.error("Bad arguments for %s: %s", name, e)
            return ToolResult(f"Error: invalid arguments for {name}: {e}", is_error=True)
        return tool(**args)

    # ── Stdio transport (NDJSON) ─────────────────────────────

    async def handle_line(self, line: str) -> dict | None:
        """Parse one NDJSON line and return the response, if any."""
        line = line.strip()
        if not line:
            return None
        try:
            req = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Parse error: %s", e)
            return None
        if not isinstance(req, dict):
            logger.warning("Ignoring non-object request: %r", req)
            return None
        logger.debug("<- %s", req.get("method", "?"))
        try:
            return await self.handle_request(req)
        except Exception:
            logger.exception("Handler error for %s", req.get("method", "?"))
            if req.get("id") is not None:
                return jsonrpc_error(req["id"], INTERNAL_ERROR, "Internal error")
            return None

    async def serve(self) -> None:
        logger.info("MCP Memory Server ready")

        reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(reader)
        await asyncio.get_running_loop().connect_read_pipe(lambda: protocol, sys.stdin)

        while True:
            raw = await reader.readline()
            if not raw:
                break
            response = await self.handle_line(raw.decode("utf-8"))
            if response:
                sys.stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
                sys.stdout.flush()

        logger.info("stdin closed, shutting down")
