from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from .capture import capture_paths
from .config import Settings
from .logstore import LogStore
from .strategies import TestPlan, execute_plan

NS_PER_SECOND = 1_000_000_000


@dataclass
class ExecutionOutcome:
    test_id: str
    exit_status: int
    stdout_path: Path
    stderr_path: Path
    elapsed: float

    @property
    def passed(self) -> bool:
        return self.exit_status == 0


def _echo(path: Path, stream: IO[str]) -> None:
    if not path.exists():
        return
    text = path.read_text(encoding="utf-8", errors="replace")
    if text:
        stream.write(text)
        stream.flush()


def profile_test(
    plan: TestPlan,
    settings: Settings,
    store: LogStore,
    echo_out: IO[str],
    echo_err: IO[str],
) -> ExecutionOutcome:
    """Run ``plan`` with captured output and record the result in ``store``.

    The outcome carries the strategy's exit status untouched; failures also
    echo the captured output so it is visible without opening the log files.
    """
    out_path, err_path = capture_paths(store.root, plan.test_id)
    with out_path.open("wb") as out_handle, err_path.open("wb") as err_handle:
        start_ns = time.monotonic_ns()
        exit_status = execute_plan(plan, settings, out_handle, err_handle)
        end_ns = time.monotonic_ns()
    elapsed = (end_ns - start_ns) / NS_PER_SECOND

    if exit_status == 0:
        store.record_pass(plan.test_id)
    else:
        store.record_fail(plan.test_id)
        _echo(out_path, echo_out)
        _echo(err_path, echo_err)
    store.record_runtime(elapsed, plan.test_id)

    return ExecutionOutcome(
        test_id=plan.test_id,
        exit_status=exit_status,
        stdout_path=out_path,
        stderr_path=err_path,
        elapsed=elapsed,
    )
