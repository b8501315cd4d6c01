from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, List, Optional, Sequence

from .capture import run_command
from .classify import Strategy, classify
from .config import Settings
from .diff import report_diff
from .errors import UsageError
from .scoped import scoped_tempfile


@dataclass(frozen=True)
class TestPlan:
    __test__ = False

    test_id: str
    strategy: Strategy
    extra_args: List[str] = field(default_factory=list)
    expected: Optional[Path] = None


def _require_file(path: Path, what: str) -> None:
    if not path.is_file():
        raise UsageError(f"{what} not found: {path}")


def build_plan(
    test_id: str,
    args: Sequence[str],
    settings: Settings,
    strategy: Optional[Strategy] = None,
) -> TestPlan:
    if strategy is None:
        strategy = classify(test_id, settings.proof_marker, settings.interactive_marker)
    if strategy == "proof":
        _require_file(Path(test_id), "proof spec")
        return TestPlan(test_id=test_id, strategy=strategy, extra_args=list(args))
    if strategy == "interactive":
        _require_file(Path(test_id), "interactive test")
        if not args:
            raise UsageError(f"interactive test {test_id} needs an expected-output file")
        expected = Path(args[0])
        _require_file(expected, "expected output")
        return TestPlan(
            test_id=test_id,
            strategy=strategy,
            extra_args=list(args[1:]),
            expected=expected,
        )
    _require_file(Path(test_id), "test file")
    return TestPlan(test_id=test_id, strategy=strategy)


def prover_command(
    spec: str, extra_args: Sequence[str], settings: Settings, debug: bool = True
) -> List[str]:
    cmd = [settings.prover, spec, "-m", settings.verification_module, *extra_args]
    if debug:
        cmd.append(settings.debug_flag)
    return cmd


def runner_command(
    program: str,
    extra_args: Sequence[str],
    settings: Settings,
    backend_dir: Optional[Path] = None,
) -> List[str]:
    mode = settings.mode_for(program)
    return [
        settings.runner,
        "--directory",
        str(backend_dir or settings.backend_dir),
        f"-cSCHEDULE={settings.schedule_token()}",
        f"-cMODE={settings.mode_token(mode)}",
        program,
        *extra_args,
    ]


def converter_command(test_id: str, settings: Settings) -> List[str]:
    return [settings.converter, test_id]


def interpreter_command(
    test_id: str, converted: Path, output: Path, settings: Settings
) -> List[str]:
    return [
        settings.interpreter_path(),
        str(settings.definition_path()),
        str(converted),
        settings.schedule_token(),
        settings.mode_token(settings.mode_for(test_id)),
        str(output),
    ]


def run_proof(plan: TestPlan, settings: Settings, stdout: IO[bytes], stderr: IO[bytes]) -> int:
    cmd = prover_command(plan.test_id, plan.extra_args, settings)
    return run_command(cmd, stdout, stderr, env=settings.extra_env)


def run_interactive(
    plan: TestPlan, settings: Settings, stdout: IO[bytes], stderr: IO[bytes]
) -> int:
    if plan.expected is None:
        raise UsageError(f"interactive test {plan.test_id} needs an expected-output file")
    cmd = runner_command(plan.test_id, plan.extra_args, settings)
    with scoped_tempfile(suffix=".out", tmp_dir=settings.tmp_dir) as captured:
        with captured.open("wb") as handle:
            status = run_command(cmd, handle, stderr, env=settings.extra_env)
        if status != 0:
            report_diff(plan.expected, captured, stdout, actual_label=f"{plan.test_id} (actual)")
    return status


def run_interpret(
    plan: TestPlan, settings: Settings, stdout: IO[bytes], stderr: IO[bytes]
) -> int:
    with scoped_tempfile(suffix=".kore", tmp_dir=settings.tmp_dir) as converted:
        with scoped_tempfile(suffix=".out", tmp_dir=settings.tmp_dir) as output:
            with converted.open("wb") as handle:
                status = run_command(
                    converter_command(plan.test_id, settings),
                    handle,
                    stderr,
                    env=settings.extra_env,
                )
            if status != 0:
                return status
            cmd = interpreter_command(plan.test_id, converted, output, settings)
            status = run_command(cmd, stdout, stderr, env=settings.extra_env)
            if status != 0 and output.exists():
                stdout.flush()
                with output.open("rb") as handle:
                    shutil.copyfileobj(handle, stdout)
                stdout.flush()
    return status


def execute_plan(plan: TestPlan, settings: Settings, stdout: IO[bytes], stderr: IO[bytes]) -> int:
    if plan.strategy == "proof":
        return run_proof(plan, settings, stdout, stderr)
    if plan.strategy == "interactive":
        return run_interactive(plan, settings, stdout, stderr)
    return run_interpret(plan, settings, stdout, stderr)
