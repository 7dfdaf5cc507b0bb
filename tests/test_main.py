"""Tests for the command-line entry point."""

from __future__ import annotations

import json

import pytest
from pathlib import Path

from memkeep.__main__ import main
from memkeep.memory.scope import Scope
from memkeep.memory.store import MemoryStore


@pytest.fixture
def dirs(tmp_path: Path, monkeypatch) -> tuple[Path, Path]:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MEMKEEP_LOCAL_DIR", str(tmp_path / "local"))
    monkeypatch.setenv("MEMKEEP_GLOBAL_DIR", str(tmp_path / "global"))
    monkeypatch.setenv("MEMKEEP_LOG_FILE", "")
    return tmp_path / "local", tmp_path / "global"


class TestMain:
    def test_paths(self, dirs, capsys):
        main(["paths"])
        out = capsys.readouterr().out
        assert f"local:  {dirs[0]}" in out
        assert f"global: {dirs[1]}" in out

    def test_retrieve(self, dirs, capsys):
        MemoryStore.from_dirs(*dirs).store("dev", "use uv", ["python"])
        main(["retrieve", "dev"])
        assert json.loads(capsys.readouterr().out) == {"python": ["use uv"]}

    def test_retrieve_global_wildcard(self, dirs, capsys):
        MemoryStore.from_dirs(*dirs).store("prefs", "dark mode", scope=Scope.GLOBAL)
        main(["retrieve", "*", "--global"])
        assert json.loads(capsys.readouterr().out) == {"prefs": ["dark mode"]}

    def test_retrieve_unsafe_category_exits(self, dirs):
        with pytest.raises(SystemExit) as exc:
            main(["retrieve", "../etc"])
        assert exc.value.code == 1

    def test_retrieve_without_category(self, dirs):
        with pytest.raises(SystemExit) as exc:
            main(["retrieve"])
        assert exc.value.code == 1

    def test_unknown_command(self, dirs):
        with pytest.raises(SystemExit) as exc:
            main(["frobnicate"])
        assert exc.value.code == 1
