from __future__ import annotations

import os
import posixpath
import tempfile
from pathlib import Path, PurePosixPath
from typing import Any, Iterable, List

import orjson

PARENT_SEGMENT = "_parent"


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def append_line(path: Path, line: str) -> None:
    # A single write on an O_APPEND handle keeps concurrent appenders from
    # interleaving partial lines.
    ensure_dir(path.parent)
    data = (line.rstrip("\n") + "\n").encode("utf-8")
    with path.open("ab") as handle:
        handle.write(data)


def read_lines(path: Path) -> List[str]:
    if not path.exists():
        return []
    text = path.read_text(encoding="utf-8")
    return [line for line in text.splitlines() if line.strip()]


def atomic_write_lines(path: Path, lines: Iterable[str]) -> None:
    ensure_dir(path.parent)
    payload = "".join(f"{line}\n" for line in lines)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)


def relative_key(test_id: str) -> PurePosixPath:
    # `..` is resolved first; whatever still escapes the root is kept as a
    # placeholder segment so distinct identifiers never share a key.
    normalized = posixpath.normpath(test_id.replace("\\", "/"))
    parts = [
        PARENT_SEGMENT if part == ".." else part
        for part in PurePosixPath(normalized).parts
        if part.strip("/")
    ]
    if not parts:
        raise ValueError(f"empty test identifier: {test_id!r}")
    return PurePosixPath(*parts)
