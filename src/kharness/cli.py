from __future__ import annotations

import sys
from pathlib import Path
from typing import IO, Any, List, Optional

import click
import typer
from rich.console import Console
from rich.markup import escape
from typer.core import TyperGroup

from .capture import run_command
from .config import Settings
from .errors import Terminated, UsageError
from .logstore import LogStore
from .profiler import profile_test
from .sampler import sample_failing
from .strategies import build_plan, execute_plan, prover_command, runner_command
from .utils import read_json


def usage_text(group: click.Group, ctx: click.Context) -> str:
    lines = [ctx.get_usage(), "", "Commands:"]
    for name in group.list_commands(ctx):
        command = group.get_command(ctx, name)
        if command is None or command.hidden:
            continue
        lines.append(f"  {name:<14}{command.get_short_help_str(limit=60)}")
    return "\n".join(lines)


class HarnessGroup(TyperGroup):
    def resolve_command(self, ctx: click.Context, args: List[str]) -> Any:
        name = args[0] if args else None
        if name and not name.startswith("-") and self.get_command(ctx, name) is None:
            console.print(usage_text(self, ctx), markup=False, highlight=False)
            ctx.exit(0)
        return super().resolve_command(ctx, args)


app = typer.Typer(
    cls=HarnessGroup,
    help="Test harness for K interpreter/prover test corpora",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}

CONFIG_OPTION = typer.Option(None, "--config", exists=True, dir_okay=False)
LOGS_DIR_OPTION = typer.Option(None, "--logs-dir", file_okay=False)
PROGRAM_ARGUMENT = typer.Argument(..., help="Program or test file")
EXTRA_ARGUMENT = typer.Argument(None, help="Arguments passed through verbatim")
COUNT_ARGUMENT = typer.Argument(1, min=0, help="Number of failing tests to sample")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        console.print(usage_text(ctx.command, ctx), markup=False, highlight=False)
        raise typer.Exit(code=0)


def _load_settings(config: Optional[Path], logs_dir: Optional[Path] = None) -> Settings:
    if config is None:
        settings = Settings()
    else:
        data = read_json(config)
        settings = Settings(**data)
    if logs_dir is not None:
        settings = settings.model_copy(update={"logs_dir": logs_dir})
    return settings


def _binary(stream: IO[str]) -> IO[bytes]:
    stream.flush()
    return stream.buffer  # type: ignore[attr-defined]


def _exit_code(status: int) -> int:
    # A child killed by a signal reports -signum.
    if status < 0:
        return 128 - status
    return status


def _finish(status: int) -> None:
    if status != 0:
        raise typer.Exit(code=_exit_code(status))


def _guarded(action: Any) -> int:
    try:
        return action()
    except UsageError as exc:
        err_console.print(f"[red]error:[/red] {escape(str(exc))}", highlight=False)
        return 1
    except Terminated as exc:
        err_console.print(f"[yellow]{escape(str(exc))}[/yellow]", highlight=False)
        return exc.exit_code


def _run_runner(
    program: str,
    args: List[str],
    settings: Settings,
    flags: Optional[List[str]] = None,
) -> int:
    if not Path(program).is_file():
        raise UsageError(f"program not found: {program}")
    cmd = runner_command(program, [*(flags or []), *args], settings)
    return run_command(cmd, _binary(sys.stdout), _binary(sys.stderr), env=settings.extra_env)


@app.command("run", context_settings=PASSTHROUGH)
def run_cmd(
    program: str = PROGRAM_ARGUMENT,
    args: Optional[List[str]] = EXTRA_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Run a program with the interactive runner."""
    settings = _load_settings(config)
    _finish(_guarded(lambda: _run_runner(program, args or [], settings)))


@app.command("run-java", context_settings=PASSTHROUGH)
def run_java_cmd(
    program: str = PROGRAM_ARGUMENT,
    args: Optional[List[str]] = EXTRA_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Run a program on the java backend."""
    settings = _load_settings(config).model_copy(update={"backend": "java"})
    _finish(_guarded(lambda: _run_runner(program, args or [], settings)))


@app.command("debug", context_settings=PASSTHROUGH)
def debug_cmd(
    program: str = PROGRAM_ARGUMENT,
    args: Optional[List[str]] = EXTRA_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Run a program under the runner's debugger."""
    settings = _load_settings(config)
    _finish(_guarded(lambda: _run_runner(program, args or [], settings, ["--debugger"])))


@app.command("search", context_settings=PASSTHROUGH)
def search_cmd(
    program: str = PROGRAM_ARGUMENT,
    args: Optional[List[str]] = EXTRA_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Search all final states of a program."""
    settings = _load_settings(config)
    _finish(_guarded(lambda: _run_runner(program, args or [], settings, ["--search"])))


@app.command("prove", context_settings=PASSTHROUGH)
def prove_cmd(
    spec: str = typer.Argument(..., help="Specification file"),
    args: Optional[List[str]] = EXTRA_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Prove a specification file."""
    settings = _load_settings(config)

    def action() -> int:
        if not Path(spec).is_file():
            raise UsageError(f"proof spec not found: {spec}")
        cmd = prover_command(spec, args or [], settings, debug=False)
        return run_command(cmd, _binary(sys.stdout), _binary(sys.stderr), env=settings.extra_env)

    _finish(_guarded(action))


@app.command("interpret")
def interpret_cmd(
    test_file: str = PROGRAM_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Convert a test file and run it on the fast interpreter."""
    settings = _load_settings(config)

    def action() -> int:
        plan = build_plan(test_file, [], settings, strategy="interpret")
        return execute_plan(plan, settings, _binary(sys.stdout), _binary(sys.stderr))

    _finish(_guarded(action))


@app.command("test", context_settings=PASSTHROUGH)
def test_cmd(
    test_file: str = PROGRAM_ARGUMENT,
    args: Optional[List[str]] = EXTRA_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Run one test with the strategy its path selects."""
    settings = _load_settings(config)

    def action() -> int:
        plan = build_plan(test_file, args or [], settings)
        return execute_plan(plan, settings, _binary(sys.stdout), _binary(sys.stderr))

    _finish(_guarded(action))


@app.command("test-profile", context_settings=PASSTHROUGH)
def test_profile_cmd(
    test_file: str = PROGRAM_ARGUMENT,
    args: Optional[List[str]] = EXTRA_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
    logs_dir: Optional[Path] = LOGS_DIR_OPTION,
) -> None:
    """Run one test, capture its output and record pass/fail and runtime."""
    settings = _load_settings(config, logs_dir)

    def action() -> int:
        plan = build_plan(test_file, args or [], settings)
        store = LogStore(settings.logs_dir)
        outcome = profile_test(plan, settings, store, sys.stdout, sys.stderr)
        return outcome.exit_status

    _finish(_guarded(action))


@app.command("sort-logs")
def sort_logs_cmd(
    config: Optional[Path] = CONFIG_OPTION,
    logs_dir: Optional[Path] = LOGS_DIR_OPTION,
) -> None:
    """Deduplicate and sort the pass/fail/runtime logs."""
    settings = _load_settings(config, logs_dir)
    summary = LogStore(settings.logs_dir).sort_logs()
    console.print(summary)


@app.command("get-failing")
def get_failing_cmd(
    count: int = COUNT_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
    logs_dir: Optional[Path] = LOGS_DIR_OPTION,
) -> None:
    """Print a random sample of failing tests."""
    settings = _load_settings(config, logs_dir)
    for test_id in sample_failing(LogStore(settings.logs_dir), count):
        console.print(test_id, markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
