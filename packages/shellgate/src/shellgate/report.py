from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from .classify import ProblemSets
from .core.context import RunContext
from .exit_codes import ERR_LINT, OK
from .output import base_payload, dumps_json


def render_failures(problems: ProblemSets, allowlist_rel: str) -> list[str]:
    """Human-readable blocks for every non-empty problem set."""
    blocks: list[str] = []
    if problems.unexpected_failures:
        lines = ["Errors from shellcheck:"]
        lines.extend(outcome.diagnostic for outcome in problems.unexpected_failures)
        lines.extend(
            [
                "",
                'Please review the above warnings. You can test via "shellgate verify"',
                "If the above warnings do not make sense, you can exempt this file from shellcheck",
                f"checking by adding it to {allowlist_rel} (if your reviewer is okay with it).",
            ]
        )
        blocks.append("\n".join(lines))
    if problems.stale_passes:
        lines = [f"Some files in {allowlist_rel} are passing shellcheck. Please remove them.", ""]
        lines.extend(f"  {path}" for path in problems.stale_passes)
        blocks.append("\n".join(lines))
    if problems.stale_entries:
        lines = [f"Some files in {allowlist_rel} do not exist anymore. Please remove them.", ""]
        lines.extend(f"  {path}" for path in problems.stale_entries)
        blocks.append("\n".join(lines))
    return blocks


def success_line(allowlist_rel: str) -> str:
    return f"Congratulations! All shell files are passing lint (excluding those in {allowlist_rel})."


def build_payload(
    ctx: RunContext,
    problems: ProblemSets,
    *,
    allowlist_rel: str,
    strategy: str,
    discovered: int,
) -> dict[str, object]:
    payload = base_payload("shellcheck-verify", "pass" if problems.ok else "fail", ctx.run_id)
    payload.update(
        {
            "repo_root": str(ctx.repo_root),
            "allowlist": allowlist_rel,
            "strategy": strategy,
            "discovered_count": discovered,
            "counts": problems.counts(),
            "unexpected_failures": [
                {"path": outcome.path, "exit_code": outcome.exit_code, "diagnostic": outcome.diagnostic}
                for outcome in problems.unexpected_failures
            ],
            "stale_passes": list(problems.stale_passes),
            "stale_entries": list(problems.stale_entries),
        }
    )
    return payload


def report(
    ctx: RunContext,
    problems: ProblemSets,
    *,
    allowlist_rel: str,
    strategy: str,
    discovered: int,
    json_report: Path | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    rc = OK if problems.ok else ERR_LINT
    payload = build_payload(ctx, problems, allowlist_rel=allowlist_rel, strategy=strategy, discovered=discovered)
    if json_report is not None:
        json_report.parent.mkdir(parents=True, exist_ok=True)
        json_report.write_text(dumps_json(payload, pretty=True) + "\n", encoding="utf-8")
    if ctx.as_json:
        print(dumps_json(payload), file=out)
        return rc
    if problems.ok:
        print(success_line(allowlist_rel), file=out)
        return rc
    for block in render_failures(problems, allowlist_rel):
        print(f"{block}\n", file=err)
    return rc
