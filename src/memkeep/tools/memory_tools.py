"""MCP tools for agent memory access.

These functions are exposed as tools to the AI agent, allowing it to store,
read and prune its own memories. Each tool validates its arguments before
touching the store and reports failures as an error result instead of raising.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from memkeep.errors import StorageError, ValidationError
from memkeep.memory.scope import WILDCARD, Scope

if TYPE_CHECKING:
    from memkeep.memory.store import MemoryStore

logger = logging.getLogger(__name__)

_IS_GLOBAL = {
    "type": "boolean",
    "default": False,
    "description": "Use the global (user-wide) store instead of the local (project) store",
}

TOOLS: list[dict[str, Any]] = [
    {
        "name": "remember",
        "description": "Stores a memory with optional tags in a specified category",
        "inputSchema": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "minLength": 1},
                "data": {"type": "string", "minLength": 1},
                "tags": {"type": "array", "items": {"type": "string"}, "default": []},
                "is_global": _IS_GLOBAL,
            },
            "required": ["category", "data"],
        },
        "annotations": {
            "title": "Remember Memory",
            "readOnlyHint": False,
            "destructiveHint": False,
            "idempotentHint": False,
            "openWorldHint": False,
        },
    },
    {
        "name": "retrieve",
        "description": (
            "Retrieves all memories from a specified category. "
            "Use '*' to retrieve every category."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "minLength": 1},
                "is_global": _IS_GLOBAL,
            },
            "required": ["category"],
        },
        "annotations": {
            "title": "Retrieve Memory",
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    },
    {
        "name": "remove_category",
        "description": (
            "Removes all memories within a specified category. "
            "Use '*' to clear every category."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "minLength": 1},
                "is_global": _IS_GLOBAL,
            },
            "required": ["category"],
        },
        "annotations": {
            "title": "Remove Memory Category",
            "readOnlyHint": False,
            "destructiveHint": True,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    },
    {
        "name": "remove_entry",
        "description": "Removes every memory in a category that contains the given text",
        "inputSchema": {
            "type": "object",
            "properties": {
                "category": {"type": "string", "minLength": 1},
                "memory_content": {"type": "string", "minLength": 1},
                "is_global": _IS_GLOBAL,
            },
            "required": ["category", "memory_content"],
        },
        "annotations": {
            "title": "Remove Specific Memory",
            "readOnlyHint": False,
            "destructiveHint": True,
            "idempotentHint": True,
            "openWorldHint": False,
        },
    },
]


@dataclass
class ToolResult:
    text: str
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


# ── Argument validation ──────────────────────────────────────


def _require_text(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")
    if not value:
        raise ValidationError(f"{label} must not be empty")
    return value


def _require_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(t, str) for t in value):
        raise ValidationError("Tags must be a list of strings")
    return list(value)


def _require_scope(value: Any) -> Scope:
    if not isinstance(value, bool):
        raise ValidationError("is_global must be a boolean")
    return Scope.from_flag(value)


def get_memory_tools(store: MemoryStore) -> dict[str, Callable[..., ToolResult]]:
    """Return a dict of tool_name -> callable for memory operations.

    These can be registered as MCP tools or called directly.
    """

    def remember(category=None, data=None, tags=None, is_global=False) -> ToolResult:
        """Append a memory (with optional tags) to a category."""
        try:
            category = _require_text(category, "Category")
            data = _require_text(data, "Data")
            scope = _require_scope(is_global)
            store.store(category, data, _require_tags(tags), scope)
        except (ValidationError, StorageError) as e:
            logger.error("Failed to store memory: %s", e)
            return ToolResult(f"Error: {e}", is_error=True)
        return ToolResult(f"Successfully stored memory in category: {category}")

    def retrieve(category=None, is_global=False) -> ToolResult:
        """Return the memories of a category (or all categories for '*') as JSON."""
        try:
            category = _require_text(category, "Category")
            memories = store.retrieve(category, _require_scope(is_global))
        except (ValidationError, StorageError) as e:
            logger.error("Failed to retrieve memories: %s", e)
            return ToolResult(f"Error: {e}", is_error=True)
        return ToolResult(json.dumps(memories, indent=2, ensure_ascii=False))

    def remove_category(category=None, is_global=False) -> ToolResult:
        """Delete a whole category (or every category for '*')."""
        try:
            category = _require_text(category, "Category")
            store.remove_category(category, _require_scope(is_global))
        except (ValidationError, StorageError) as e:
            logger.error("Failed to remove memory category: %s", e)
            return ToolResult(f"Error: {e}", is_error=True)
        if category == WILDCARD:
            return ToolResult(f"Cleared all {'global' if is_global else 'local'} memory categories")
        return ToolResult(f"Cleared memories in category: {category}")

    def remove_entry(category=None, memory_content=None, is_global=False) -> ToolResult:
        """Delete every memory in a category whose text contains memory_content."""
        try:
            category = _require_text(category, "Category")
            memory_content = _require_text(memory_content, "Memory content")
            store.remove_entry(category, memory_content, _require_scope(is_global))
        except (ValidationError, StorageError) as e:
            logger.error("Failed to remove specific memory: %s", e)
            return ToolResult(f"Error: {e}", is_error=True)
        return ToolResult(f"Removed specific memory from category: {category}")

    return {
        "remember": remember,
        "retrieve": retrieve,
        "remove_category": remove_category,
        "remove_entry": remove_entry,
    }
