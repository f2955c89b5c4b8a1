"""The verification pipeline: discover, check allow-list, provision, lint, classify, report."""

from __future__ import annotations

import signal
import sys
import threading
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Iterator, TextIO

from .allowlist import AllowList
from .classify import classify
from .config import Settings
from .core.context import RunContext
from .core.git import IgnoreOracle
from .core.logging import log_event
from .discovery import discover_scripts
from .lint import lint_scripts
from .provision import ToolMode, provision
from .report import report


@contextmanager
def terminate_as_exit() -> Iterator[None]:
    """Turn SIGTERM into SystemExit so registered cleanups still run."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _raise(signum: int, _frame: object) -> None:
        raise SystemExit(128 + signum)

    previous = signal.signal(signal.SIGTERM, _raise)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def load_allowlist(ctx: RunContext, settings: Settings) -> AllowList:
    allow = AllowList.load(settings.allowlist_file(ctx.repo_root))
    if not allow.exists:
        log_event(ctx, "warn", "allowlist", "missing", path=settings.allowlist_path)
    allow.check_sorted()
    return allow


def verify(
    ctx: RunContext,
    settings: Settings,
    *,
    tool_mode: ToolMode = "auto",
    json_report: Path | None = None,
    is_ignored: IgnoreOracle | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    scripts = discover_scripts(ctx.repo_root, settings, is_ignored)
    log_event(ctx, "info", "discovery", "finished", count=len(scripts))
    allow = load_allowlist(ctx, settings)

    with ExitStack() as stack:
        stack.enter_context(terminate_as_exit())
        strategy = provision(ctx, settings, stack, tool_mode)
        if not (ctx.quiet or ctx.as_json):
            print(strategy.describe(), file=out)
        outcomes = lint_scripts(strategy, scripts, settings.jobs)

    problems = classify(scripts, allow.entries, outcomes)
    return report(
        ctx,
        problems,
        allowlist_rel=settings.allowlist_path,
        strategy=strategy.name,
        discovered=len(scripts),
        json_report=json_report,
        out=out,
        err=err,
    )
