"""Entry point: python -m memkeep [serve|retrieve|paths]

- No args / "serve": MCP stdio server (what agents launch)
- "retrieve":        Print a category (or '*') as JSON, for inspection
- "paths":           Print the local and global memory directories
"""

from __future__ import annotations

import asyncio
import getpass
import json
import logging
import platform
import socket
import sys
from pathlib import Path

from memkeep.config import MemkeepConfig, load_config
from memkeep.errors import MemkeepError
from memkeep.memory.scope import Scope
from memkeep.memory.store import MemoryStore

logger = logging.getLogger("memkeep")


def _setup_logging(level: str, log_file: Path | None) -> None:
    # stdout is the protocol channel
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as e:
            print(f"memkeep: cannot open log file {log_file}: {e}", file=sys.stderr)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def _build_store(config: MemkeepConfig) -> MemoryStore:
    return MemoryStore.from_dirs(config.storage.local_dir, config.storage.global_dir)


def _run_serve(config: MemkeepConfig) -> None:
    from memkeep.server import MemoryServer

    logger.info("MCP Memory Server started")
    logger.info("Platform: %s", platform.system())
    logger.info("Hostname: %s", socket.gethostname())
    logger.info("Username: %s", getpass.getuser())

    server = MemoryServer(_build_store(config))
    try:
        asyncio.run(server.serve())
    except KeyboardInterrupt:
        pass


def _run_retrieve(config: MemkeepConfig, category: str, is_global: bool) -> None:
    store = _build_store(config)
    memories = store.retrieve(category, Scope.from_flag(is_global))
    print(json.dumps(memories, indent=2, ensure_ascii=False))


def _run_paths(config: MemkeepConfig) -> None:
    print(f"local:  {config.storage.local_dir}")
    print(f"global: {config.storage.global_dir}")


def _usage() -> None:
    print("Usage: python -m memkeep [serve|retrieve <category> [--global]|paths]")
    print("  serve     — MCP stdio server (default)")
    print("  retrieve  — Print a category (or '*') as JSON")
    print("  paths     — Print the local and global memory directories")
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    cmd = args[0] if args else "serve"

    config = load_config()
    _setup_logging(config.log_level, config.log_file)

    try:
        if cmd == "serve":
            _run_serve(config)
        elif cmd == "retrieve":
            rest = [a for a in args[1:] if a != "--global"]
            if len(rest) != 1:
                _usage()
            _run_retrieve(config, rest[0], "--global" in args[1:])
        elif cmd == "paths":
            _run_paths(config)
        else:
            _usage()
    except MemkeepError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
