"""Configuration loading from environment variables and memkeep.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "memkeep.toml"
_USER_CONFIG_DIR = Path.home() / ".config" / "memkeep"
_DEFAULT_GLOBAL_DIR = _USER_CONFIG_DIR / "memory"
_DEFAULT_LOG_FILE = Path.home() / ".memkeep-server.log"


def _default_local_dir() -> Path:
    return Path.cwd() / ".memkeep" / "memory"


@dataclass
class StorageConfig:
    """Where each scope's category files live."""

    local_dir: Path = field(default_factory=_default_local_dir)
    global_dir: Path = _DEFAULT_GLOBAL_DIR


@dataclass
class MemkeepConfig:
    """Top-level memkeep configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    log_level: str = "INFO"
    log_file: Path | None = _DEFAULT_LOG_FILE


def _path(value: str | os.PathLike | None) -> Path | None:
    return Path(value).expanduser() if value else None


def load_config(config_path: Path | None = None) -> MemkeepConfig:
    """Load configuration from environment variables and optional memkeep.toml.

    Priority: environment variables > memkeep.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.config/memkeep/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _USER_CONFIG_DIR / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    storage_data = file_data.get("storage", {})

    local_dir = _path(os.getenv("MEMKEEP_LOCAL_DIR", storage_data.get("local_dir")))
    global_dir = _path(os.getenv("MEMKEEP_GLOBAL_DIR", storage_data.get("global_dir")))
    log_file = os.getenv("MEMKEEP_LOG_FILE", file_data.get("log_file", str(_DEFAULT_LOG_FILE)))

    return MemkeepConfig(
        storage=StorageConfig(
            local_dir=local_dir or _default_local_dir(),
            global_dir=global_dir or _DEFAULT_GLOBAL_DIR,
        ),
        log_level=os.getenv("MEMKEEP_LOG_LEVEL", file_data.get("log_level", "INFO")),
        # An empty MEMKEEP_LOG_FILE disables the file handler
        log_file=_path(log_file),
    )
