from __future__ import annotations

import io
import os
import subprocess
from pathlib import Path
from typing import IO, Any, Mapping, Optional, Sequence, Tuple

from .utils import ensure_dir, relative_key

OUT_SUFFIX = ".out"
ERR_SUFFIX = ".err"


def capture_paths(logs_dir: Path, test_id: str) -> Tuple[Path, Path]:
    key = relative_key(test_id)
    out_path = logs_dir / f"{key}{OUT_SUFFIX}"
    err_path = logs_dir / f"{key}{ERR_SUFFIX}"
    ensure_dir(out_path.parent)
    return out_path, err_path


def _target(stream: IO[bytes]) -> Any:
    try:
        stream.fileno()
    except (AttributeError, OSError, io.UnsupportedOperation):
        return subprocess.PIPE
    return stream


def run_command(
    cmd: Sequence[str],
    stdout: IO[bytes],
    stderr: IO[bytes],
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """Run ``cmd`` to completion with its output bound to the given streams.

    Streams backed by a file descriptor are handed to the child directly;
    in-memory streams receive the output after the child exits. There is no
    timeout.
    """
    stdout.flush()
    stderr.flush()
    out_target = _target(stdout)
    err_target = _target(stderr)
    child_env = None
    if env:
        child_env = {**os.environ, **env}
    proc = subprocess.run(
        list(cmd),
        stdout=out_target,
        stderr=err_target,
        env=child_env,
        check=False,
    )
    if out_target is subprocess.PIPE and proc.stdout:
        stdout.write(proc.stdout)
        stdout.flush()
    if err_target is subprocess.PIPE and proc.stderr:
        stderr.write(proc.stderr)
        stderr.flush()
    return proc.returncode
