from __future__ import annotations

import difflib
from pathlib import Path
from typing import IO, List


def _read(path: Path) -> List[str]:
    if not path.exists():
        return []
    text = path.read_text(encoding="utf-8", errors="replace")
    return [line.rstrip() + "\n" for line in text.splitlines()]


def unified_diff(expected: Path, actual: Path, actual_label: str = "actual") -> List[str]:
    return list(
        difflib.unified_diff(
            _read(expected),
            _read(actual),
            fromfile=str(expected),
            tofile=actual_label,
        )
    )


def report_diff(expected: Path, actual: Path, out: IO[bytes], actual_label: str = "actual") -> bool:
    """Write a unified diff of ``expected`` against ``actual`` to ``out``.

    Purely diagnostic: callers decide pass/fail from exit status alone.
    """
    lines = unified_diff(expected, actual, actual_label)
    if lines:
        out.write("".join(lines).encode("utf-8"))
        out.flush()
    return bool(lines)
