"""Encoding and decoding of category file bodies.

An entry is serialized as an optional ``# tag1 tag2`` header line, the data,
and a blank-line terminator. Decoding splits on the blank line, so data that
itself contains a blank line reads back as more than one block.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

ENTRY_DELIMITER = "\n\n"
TAG_PREFIX = "# "
UNTAGGED = "untagged"


@dataclass
class MemoryEntry:
    """One stored memory: optional tags plus free-text data."""

    data: str
    tags: list[str] = field(default_factory=list)

    @property
    def group_key(self) -> str:
        return " ".join(self.tags) if self.tags else UNTAGGED


def encode_entry(data: str, tags: Sequence[str] = ()) -> str:
    """Serialize one entry, including its trailing delimiter."""
    header = f"{TAG_PREFIX}{' '.join(tags)}\n" if tags else ""
    return f"{header}{data}{ENTRY_DELIMITER}"


def split_blocks(body: str) -> list[str]:
    """Split a raw category body into its raw, undecoded blocks."""
    return body.split(ENTRY_DELIMITER)


def join_blocks(blocks: Sequence[str]) -> str:
    return ENTRY_DELIMITER.join(blocks)


def parse_block(block: str) -> MemoryEntry | None:
    """Decode a single raw block. Returns None for blank blocks."""
    if not block.strip():
        return None
    lines = block.split("\n")
    first = lines[0]
    if first.startswith(TAG_PREFIX):
        # Split on single spaces so the joined group key reproduces the header
        header = first[len(TAG_PREFIX):].strip()
        tags = header.split(" ") if header else []
        return MemoryEntry(data="\n".join(lines[1:]), tags=tags)
    return MemoryEntry(data=block)


def decode_grouped(body: str) -> dict[str, list[str]]:
    """Group the non-blank lines of every block by tag key (or "untagged").

    Blocks sharing a key accumulate into one list in file order; the
    boundary between entries is not preserved.
    """
    grouped: dict[str, list[str]] = {}
    for block in split_blocks(body):
        entry = parse_block(block)
        if entry is None:
            continue
        lines = [line for line in entry.data.split("\n") if line.strip()]
        grouped.setdefault(entry.group_key, []).extend(lines)
    return grouped


def flatten(grouped: dict[str, list[str]]) -> list[str]:
    """All lines of all groups, in group order. Group keys are dropped."""
    return [line for lines in grouped.values() for line in lines]


def remove_matching(body: str, needle: str) -> str:
    """Drop every raw block containing ``needle`` and rejoin the rest."""
    kept = [block for block in split_blocks(body) if needle not in block]
    return join_blocks(kept)
