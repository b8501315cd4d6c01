import stat
import sys
from pathlib import Path

import pytest

from kharness.config import Settings

FAKE_K = Path(__file__).resolve().parent / "fixtures" / "fake_k.py"


def _make_tool(bin_dir: Path, role: str) -> str:
    bin_dir.mkdir(parents=True, exist_ok=True)
    path = bin_dir / f"fake-{role}"
    path.write_text(
        f'#!/bin/sh\nexec "{sys.executable}" "{FAKE_K}" {role} "$@"\n',
        encoding="utf-8",
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    bin_dir = tmp_path / "bin"
    return Settings(
        build_dir=tmp_path / "build",
        logs_dir=tmp_path / "logs",
        tmp_dir=tmp_path / "tmp",
        converter=_make_tool(bin_dir, "converter"),
        interpreter=_make_tool(bin_dir, "interpreter"),
        definition=tmp_path / "build" / "definition.kore",
        prover=_make_tool(bin_dir, "prover"),
        runner=_make_tool(bin_dir, "runner"),
    )


@pytest.fixture
def config_file(tmp_path: Path, settings: Settings) -> Path:
    path = tmp_path / "kharness.json"
    path.write_text(settings.model_dump_json(), encoding="utf-8")
    return path
