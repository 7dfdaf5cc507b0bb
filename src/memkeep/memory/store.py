"""Memory store — categorized, tagged memories in flat text files.

One file per category per scope. Every operation re-reads and re-parses the
affected file; there is no index and no cache.

Operations on the same (scope, category) are serialized with a per-key lock so
that the read-modify-write in ``remove_entry`` cannot interleave with an append
from another thread. Writers in other processes are not coordinated: a
concurrent append from another process during ``remove_entry`` can be lost.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from pathlib import Path

from memkeep.errors import StorageError, ValidationError
from memkeep.memory.format import decode_grouped, encode_entry, flatten, remove_matching
from memkeep.memory.scope import WILDCARD, Scope, ScopeDir

logger = logging.getLogger(__name__)


class MemoryStore:
    """Read/write access to the local and global memory directories."""

    def __init__(self, scopes: Mapping[Scope, ScopeDir]) -> None:
        missing = [s.value for s in Scope if s not in scopes]
        if missing:
            raise ValueError(f"No directory configured for scope(s): {', '.join(missing)}")
        self.scopes = dict(scopes)
        self._locks: dict[tuple[Scope, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._ensure_initialized()

    @classmethod
    def from_dirs(cls, local_dir: Path, global_dir: Path) -> MemoryStore:
        return cls({Scope.LOCAL: ScopeDir(local_dir), Scope.GLOBAL: ScopeDir(global_dir)})

    # ── Initialization ───────────────────────────────────────

    def _ensure_initialized(self) -> None:
        """Create every scope directory. Idempotent."""
        for scope, scope_dir in self.scopes.items():
            try:
                scope_dir.ensure()
            except OSError as e:
                raise StorageError(f"Cannot create {scope.value} memory dir {scope_dir.root}: {e}") from e

    # ── Per-category serialization ───────────────────────────

    def _get_lock(self, scope: Scope, category: str) -> threading.Lock:
        # Entries are never dropped, even after remove_category: a thread may
        # still be waiting on the old lock, and a fresh one would not exclude it.
        key = (scope, category)
        with self._locks_guard:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _path(self, category: str, scope: Scope) -> Path:
        return self.scopes[scope].path_for(category)

    def _read(self, path: Path) -> str | None:
        try:
            # Undecodable bytes become U+FFFD instead of failing the whole read
            return path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    # ── Operations ───────────────────────────────────────────

    def categories(self, scope: Scope = Scope.LOCAL) -> list[str]:
        """Names of the categories that currently exist in a scope."""
        try:
            return self.scopes[scope].categories()
        except OSError as e:
            raise StorageError(f"Failed to list {scope.value} memories: {e}") from e

    def store(
        self,
        category: str,
        data: str,
        tags: Sequence[str] = (),
        scope: Scope = Scope.LOCAL,
    ) -> None:
        """Append one entry to a category, creating its file if absent."""
        if category == WILDCARD:
            raise ValidationError("Cannot store into the wildcard category '*'")
        if not data:
            raise ValidationError("Data must not be empty")
        for tag in tags:
            if not tag.strip() or "\n" in tag or "\r" in tag:
                raise ValidationError(f"Tags must be non-empty single-line strings: {tag!r}")

        path = self._path(category, scope)
        content = encode_entry(data, tags)
        with self._get_lock(scope, category):
            try:
                with path.open("a", encoding="utf-8") as f:
                    f.write(content)
            except OSError as e:
                raise StorageError(f"Failed to store memory in {path}: {e}") from e
        logger.info("Memory stored in category: %s, global: %s", category, scope is Scope.GLOBAL)

    def retrieve(self, category: str, scope: Scope = Scope.LOCAL) -> dict[str, list[str]]:
        """Grouped view of one category, or ``{category: lines}`` for ``*``.

        A missing category yields an empty mapping.
        """
        if category == WILDCARD:
            memories: dict[str, list[str]] = {}
            for name in self.categories(scope):
                lines = flatten(self._retrieve_one(name, scope))
                if lines:
                    memories[name] = lines
            logger.info("Retrieved all memories, global: %s", scope is Scope.GLOBAL)
            return memories

        grouped = self._retrieve_one(category, scope)
        logger.info("Retrieved memories for category: %s, global: %s", category, scope is Scope.GLOBAL)
        return grouped

    def _retrieve_one(self, category: str, scope: Scope) -> dict[str, list[str]]:
        path = self._path(category, scope)
        with self._get_lock(scope, category):
            body = self._read(path)
        if body is None:
            return {}
        return decode_grouped(body)

    def remove_category(self, category: str, scope: Scope = Scope.LOCAL) -> None:
        """Delete a category file, or every category file for ``*``."""
        if category == WILDCARD:
            for name in self.categories(scope):
                self._remove_one(name, scope)
            logger.info("Cleared all memory categories, global: %s", scope is Scope.GLOBAL)
            return

        self._remove_one(category, scope)
        logger.info("Cleared memories in category: %s, global: %s", category, scope is Scope.GLOBAL)

    def _remove_one(self, category: str, scope: Scope) -> None:
        path = self._path(category, scope)
        with self._get_lock(scope, category):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Failed to remove {path}: {e}") from e

    def remove_entry(self, category: str, memory_content: str, scope: Scope = Scope.LOCAL) -> None:
        """Drop every entry whose raw text contains ``memory_content``."""
        if category == WILDCARD:
            raise ValidationError("remove_entry needs a concrete category, not '*'")
        if not memory_content:
            raise ValidationError("Memory content must not be empty")

        path = self._path(category, scope)
        with self._get_lock(scope, category):
            body = self._read(path)
            if body is not None:
                try:
                    path.write_text(remove_matching(body, memory_content), encoding="utf-8")
                except OSError as e:
                    raise StorageError(f"Failed to rewrite {path}: {e}") from e
        logger.info("Removed specific memory from category: %s, global: %s", category, scope is Scope.GLOBAL)
