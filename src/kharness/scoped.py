from __future__ import annotations

import os
import signal
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .errors import Terminated

TEMP_PREFIX = "kharness-"


def _raise_terminated(signum: int, _frame: object) -> None:
    raise Terminated(signum)


@contextmanager
def termination_guard() -> Iterator[None]:
    """Turn SIGTERM into a ``Terminated`` exception so ``finally`` blocks run.

    SIGINT already surfaces as ``KeyboardInterrupt``. Signal handlers can only
    be installed from the main thread; elsewhere this is a no-op.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.getsignal(signal.SIGTERM)
    signal.signal(signal.SIGTERM, _raise_terminated)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


@contextmanager
def scoped_tempfile(suffix: str = "", tmp_dir: Optional[Path] = None) -> Iterator[Path]:
    if tmp_dir is not None:
        tmp_dir.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(
        prefix=TEMP_PREFIX,
        suffix=suffix,
        dir=str(tmp_dir) if tmp_dir is not None else None,
    )
    os.close(fd)
    path = Path(name)
    try:
        with termination_guard():
            yield path
    finally:
        path.unlink(missing_ok=True)
