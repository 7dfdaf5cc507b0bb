"""Storage scopes: which directory a category file lives in."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path

from memkeep.errors import ValidationError

WILDCARD = "*"
DEFAULT_SUFFIX = ".txt"

_UNSAFE_CHARS = {"/", "\\", "\x00", os.sep} | ({os.altsep} if os.altsep else set())


class Scope(enum.Enum):
    LOCAL = "local"
    GLOBAL = "global"

    @classmethod
    def from_flag(cls, is_global: bool) -> Scope:
        return cls.GLOBAL if is_global else cls.LOCAL


def validate_category(category: str) -> str:
    """Reject category names that could escape the scope directory."""
    if not isinstance(category, str) or not category:
        raise ValidationError("Category must not be empty")
    if category in (".", ".."):
        raise ValidationError(f"Invalid category name: {category!r}")
    if any(c in category for c in _UNSAFE_CHARS):
        raise ValidationError(
            f"Category must not contain path separators: {category!r}"
        )
    return category


@dataclass
class ScopeDir:
    """Handle on one scope's directory. Created once at startup."""

    root: Path
    suffix: str = DEFAULT_SUFFIX

    def ensure(self) -> None:
        """Create the root directory. Idempotent."""
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, category: str) -> Path:
        validate_category(category)
        return self.root / f"{category}{self.suffix}"

    def categories(self) -> list[str]:
        """Names of every existing category file, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(
            p.name[: -len(self.suffix)]
            for p in self.root.glob(f"*{self.suffix}")
            if p.is_file()
        )
