"""Server instructions sent to the agent on initialize."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from memkeep.errors import StorageError
from memkeep.memory.format import flatten
from memkeep.memory.scope import Scope

if TYPE_CHECKING:
    from memkeep.memory.store import MemoryStore

logger = logging.getLogger(__name__)

BASE_INSTRUCTIONS = """\
This extension allows storage and retrieval of categorized information with tagging support. It's designed to help
manage important information across sessions in a systematic and organized manner.
Capabilities:
1. Store information in categories with optional tags for context-based retrieval.
2. Retrieve a category, or every category with '*'.
3. Remove entire categories of memories when they are no longer needed.
4. Remove individual memories that contain a given piece of text.

When to call memory tools:
These are examples where the assistant should proactively call the memory tool because the user is providing
recurring preferences, project details, or workflow habits that they may expect to be remembered:
- Preferred development tools & conventions
- User-specific data (e.g., name, preferences)
- Project-related configurations
- Workflow descriptions
- Other critical settings

Interaction protocol:
1. Identify the critical piece of information.
2. Ask the user if they'd like to store it for later reference.
3. Upon agreement:
   - Suggest a relevant category like "personal" for user data or "development" for project preferences.
   - Inquire about any specific tags they want to apply for easier lookup.
   - Confirm the desired storage location:
     - Local storage ({local_dir}) for project-specific details.
     - Global storage ({global_dir}) for user-wide data.
   - Use the remember tool to store the information.
     - `remember(category, data, tags, is_global)`
"""

SAVED_HEADER = """
**Here are the user's currently saved memories:**
Please keep this information in mind when answering future questions.
Do not bring up memories unless relevant.
Note: if the user has not saved any memories, this section will be empty.
Note: if the user removes a memory that was previously loaded into the system, please remove it from the system instructions.
"""


def _format_section(title: str, memories: dict[str, list[str]]) -> str:
    if not memories:
        return ""
    out = f"\n\n{title}:\n"
    for category, lines in memories.items():
        out += f"\nCategory: {category}\n"
        for line in lines:
            out += f"- {line}\n"
    return out


def _load_scope(store: MemoryStore, scope: Scope) -> dict[str, list[str]]:
    """Flattened memories of every readable category; unreadable ones are skipped."""
    memories: dict[str, list[str]] = {}
    for category in store.categories(scope):
        try:
            lines = flatten(store.retrieve(category, scope))
        except StorageError as e:
            logger.error("Skipping unreadable %s category %s: %s", scope.value, category, e)
            continue
        if lines:
            memories[category] = lines
    return memories


def build_instructions(store: MemoryStore) -> str:
    """Base usage text followed by every saved memory (global first, then local)."""
    text = BASE_INSTRUCTIONS.format(
        local_dir=store.scopes[Scope.LOCAL].root,
        global_dir=store.scopes[Scope.GLOBAL].root,
    )
    try:
        global_memories = _load_scope(store, Scope.GLOBAL)
        local_memories = _load_scope(store, Scope.LOCAL)
    except StorageError as e:
        logger.error("Failed to load existing memories: %s", e)
        return text

    text += SAVED_HEADER
    text += _format_section("Global Memories", global_memories)
    text += _format_section("Local Memories", local_memories)
    return text
