import os
import signal
import time
from pathlib import Path

import pytest

from kharness.errors import Terminated
from kharness.scoped import TEMP_PREFIX, scoped_tempfile, termination_guard


def test_scoped_tempfile_removed_on_exit(tmp_path: Path) -> None:
    with scoped_tempfile(suffix=".out", tmp_dir=tmp_path) as path:
        assert path.exists()
        assert path.name.startswith(TEMP_PREFIX)
        path.write_text("data", encoding="utf-8")
    assert list(tmp_path.iterdir()) == []


def test_scoped_tempfile_removed_on_error(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        with scoped_tempfile(tmp_dir=tmp_path):
            raise RuntimeError("boom")
    assert list(tmp_path.iterdir()) == []


def test_scoped_tempfile_removed_on_keyboard_interrupt(tmp_path: Path) -> None:
    with pytest.raises(KeyboardInterrupt):
        with scoped_tempfile(tmp_dir=tmp_path):
            raise KeyboardInterrupt
    assert list(tmp_path.iterdir()) == []


def test_scoped_tempfile_removed_on_sigterm(tmp_path: Path) -> None:
    with pytest.raises(Terminated) as excinfo:
        with scoped_tempfile(tmp_dir=tmp_path):
            os.kill(os.getpid(), signal.SIGTERM)
            time.sleep(5)
    assert excinfo.value.exit_code == 128 + signal.SIGTERM
    assert list(tmp_path.iterdir()) == []


def test_termination_guard_restores_handler() -> None:
    before = signal.getsignal(signal.SIGTERM)
    with termination_guard():
        assert signal.getsignal(signal.SIGTERM) is not before
    assert signal.getsignal(signal.SIGTERM) == before


def test_scoped_tempfile_tolerates_early_removal(tmp_path: Path) -> None:
    with scoped_tempfile(tmp_dir=tmp_path) as path:
        path.unlink()
    assert list(tmp_path.iterdir()) == []
