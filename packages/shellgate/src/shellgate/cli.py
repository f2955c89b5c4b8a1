from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import load_settings
from .core.context import RunContext
from .core.logging import log_event
from .discovery import discover_scripts
from .errors import ScriptError
from .exit_codes import ERR_INTERNAL, ERR_USAGE, OK
from .output import base_payload, dumps_json, render_error
from .provision import TOOL_MODES, probe
from .verify import load_allowlist, verify


def configure_verify_parser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    p = sub.add_parser("verify", help="lint every shell script and reconcile with the allow-list")
    p.add_argument("--jobs", type=int, default=None, help="parallel shellcheck invocations (default from config, 1)")
    p.add_argument("--tool-mode", choices=TOOL_MODES, default="auto", help="force how shellcheck is provided")
    p.add_argument("--json-report", help="also write the JSON report to this path")


def configure_allowlist_parser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    p = sub.add_parser("allowlist", help="allow-list maintenance commands")
    p_sub = p.add_subparsers(dest="allowlist_cmd", required=True)
    p_sub.add_parser("check", help="fail unless the allow-list is byte-wise sorted without duplicates")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="shellgate", description="repository-wide shellcheck gate")
    p.add_argument("--version", action="version", version=f"shellgate {__version__}")
    p.add_argument("--repo-root", help="repository root (default: `git rev-parse --show-toplevel`)")
    p.add_argument("--config", help="config file (default: configs/shellgate.yaml under the repo root)")
    p.add_argument("--run-id", help="run identifier used in log events")
    p.add_argument("--format", choices=["text", "json"], default="text", help="output format")
    p.add_argument("--network", choices=["allow", "forbid"], default="allow", help="network access mode")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    configure_verify_parser(sub)
    sub.add_parser("discover", help="print the shell scripts that would be linted")
    configure_allowlist_parser(sub)
    sub.add_parser("doctor", help="show which shellcheck provisioning paths are usable")
    return p


def _run_discover(ctx: RunContext, ns: argparse.Namespace) -> int:
    settings = load_settings(ctx.repo_root, ns.config)
    scripts = discover_scripts(ctx.repo_root, settings)
    if ctx.as_json:
        payload = base_payload("shellcheck-discover", "ok", ctx.run_id)
        payload["scripts"] = list(scripts)
        print(dumps_json(payload))
    else:
        print("\n".join(scripts))
    return OK


def _run_allowlist(ctx: RunContext, ns: argparse.Namespace) -> int:
    settings = load_settings(ctx.repo_root, ns.config)
    allow = load_allowlist(ctx, settings)
    if ctx.as_json:
        payload = base_payload("shellcheck-allowlist", "ok", ctx.run_id)
        payload.update({"path": settings.allowlist_path, "entries": len(allow)})
        print(dumps_json(payload))
    elif not ctx.quiet:
        print(f"{settings.allowlist_path}: {len(allow)} entries, sorted")
    return OK


def _run_doctor(ctx: RunContext, ns: argparse.Namespace) -> int:
    settings = load_settings(ctx.repo_root, ns.config)
    report = probe(ctx, settings)
    if ctx.as_json:
        payload = base_payload("shellcheck-doctor", "ok", ctx.run_id)
        payload["probes"] = report
        print(dumps_json(payload))
    else:
        for key, value in report.items():
            print(f"- {key}: {value if value != '' else 'n/a'}")
    return OK


def _run_verify(ctx: RunContext, ns: argparse.Namespace) -> int:
    settings = load_settings(ctx.repo_root, ns.config).replace(jobs=ns.jobs)
    if settings.jobs < 1:
        raise ScriptError("--jobs must be >= 1", ERR_USAGE, kind="usage_error")
    json_report = Path(ns.json_report).resolve() if ns.json_report else None
    return verify(ctx, settings, tool_mode=ns.tool_mode, json_report=json_report)


_RUNNERS = {
    "verify": _run_verify,
    "discover": _run_discover,
    "allowlist": _run_allowlist,
    "doctor": _run_doctor,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    as_json = ns.format == "json"
    ctx: RunContext | None = None
    try:
        ctx = RunContext.from_args(
            ns.repo_root,
            ns.run_id,
            ns.format,
            ns.network,
            ns.verbose,
            ns.quiet,
            ns.log_json,
        )
        log_event(ctx, "info", "cli", "start", cmd=ns.cmd, repo_root=str(ctx.repo_root), network=ctx.network_mode)
        rc = _RUNNERS[ns.cmd](ctx, ns)
        log_event(ctx, "info", "cli", "finish", cmd=ns.cmd, rc=rc)
        return rc
    except ScriptError as exc:
        if ctx is not None:
            log_event(ctx, "info", "cli", "failed", cmd=ns.cmd, kind=exc.kind, code=exc.code)
        print(
            render_error(
                as_json=as_json,
                message=str(exc),
                code=exc.code,
                kind=exc.kind,
                remedy=exc.remedy,
                run_id=(ctx.run_id if ctx else ""),
            ),
            file=sys.stderr,
        )
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(
            render_error(
                as_json=as_json,
                message=f"internal error: {exc}",
                code=ERR_INTERNAL,
                run_id=(ctx.run_id if ctx else ""),
            ),
            file=sys.stderr,
        )
        return ERR_INTERNAL


__all__ = ["build_parser", "main"]
