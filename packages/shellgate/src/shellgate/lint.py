from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from .core.logging import log_event
from .strategies import ExecutionStrategy, LintOutcome


def lint_scripts(strategy: ExecutionStrategy, scripts: Iterable[str], jobs: int = 1) -> dict[str, LintOutcome]:
    """Lint every script and collect the outcomes by path.

    With ``jobs > 1`` invocations overlap; the mapping is only returned once
    all of them have finished.
    """
    ordered = list(scripts)
    if jobs <= 1 or len(ordered) <= 1:
        outcomes = [strategy.run(script) for script in ordered]
    else:
        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="shellgate-lint") as pool:
            outcomes = list(pool.map(strategy.run, ordered))
    failed = sum(1 for outcome in outcomes if outcome.failed)
    log_event(
        strategy.ctx,
        "info",
        "lint",
        "finished",
        strategy=strategy.name,
        total=len(outcomes),
        failed=failed,
        jobs=jobs,
    )
    return {outcome.path: outcome for outcome in outcomes}
