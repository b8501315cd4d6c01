from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .utils import append_line, atomic_write_lines, read_lines

PASSING_LOG = "passing.lastrun"
FAILING_LOG = "failing.lastrun"
RUNTIME_LOG = "runtime"


@dataclass(frozen=True)
class RuntimeRecord:
    elapsed: float
    test_id: str

    def render(self) -> str:
        return f"{self.elapsed:.6f} {self.test_id}"

    @classmethod
    def parse(cls, line: str) -> "RuntimeRecord":
        elapsed, sep, test_id = line.strip().partition(" ")
        if not sep or not test_id:
            raise ValueError(f"malformed runtime record: {line!r}")
        return cls(elapsed=float(elapsed), test_id=test_id)


def _try_parse(line: str) -> Optional[RuntimeRecord]:
    try:
        return RuntimeRecord.parse(line)
    except ValueError:
        return None


def _runtime_key(line: str) -> Tuple[int, str]:
    # Malformed lines are keyed by their full text and sort after records.
    record = _try_parse(line)
    if record is None:
        return (1, line)
    return (0, record.test_id)


def normalize_set_lines(lines: List[str]) -> List[str]:
    return sorted({line.strip() for line in lines if line.strip()})


def normalize_runtime_lines(lines: List[str]) -> List[str]:
    # First record seen for an identifier wins; output ordered by identifier.
    by_id: Dict[Tuple[int, str], str] = {}
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        by_id.setdefault(_runtime_key(stripped), stripped)
    return [by_id[key] for key in sorted(by_id)]


class LogStore:
    """Append-only pass/fail/runtime logs shared by every harness process.

    Appends are whole-line writes and may come from many processes at once.
    ``sort_logs`` is the only rewrite and goes through a temp-file swap.
    Passing and failing entries are never reconciled against each other.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @property
    def passing_path(self) -> Path:
        return self.root / PASSING_LOG

    @property
    def failing_path(self) -> Path:
        return self.root / FAILING_LOG

    @property
    def runtime_path(self) -> Path:
        return self.root / RUNTIME_LOG

    def record_pass(self, test_id: str) -> None:
        append_line(self.passing_path, test_id)

    def record_fail(self, test_id: str) -> None:
        append_line(self.failing_path, test_id)

    def record_runtime(self, elapsed: float, test_id: str) -> None:
        append_line(self.runtime_path, RuntimeRecord(max(elapsed, 0.0), test_id).render())

    def passing(self) -> List[str]:
        return read_lines(self.passing_path)

    def failing(self) -> List[str]:
        return read_lines(self.failing_path)

    def runtimes(self) -> List[RuntimeRecord]:
        records = (_try_parse(line) for line in read_lines(self.runtime_path))
        return [record for record in records if record is not None]

    def sort_logs(self) -> Dict[str, Dict[str, int]]:
        summary: Dict[str, Dict[str, int]] = {}
        for path in (self.passing_path, self.failing_path):
            if path.exists():
                summary[path.name] = _rewrite(path, normalize_set_lines)
        if self.runtime_path.exists():
            summary[self.runtime_path.name] = _rewrite(self.runtime_path, normalize_runtime_lines)
        return summary


def _rewrite(path: Path, normalize) -> Dict[str, int]:
    snapshot = read_lines(path)
    normalized = normalize(snapshot)
    atomic_write_lines(path, normalized)
    return {"before": len(snapshot), "after": len(normalized)}
