"""CLI payload output helpers."""

from __future__ import annotations

import json
from typing import Any

from . import __version__


def dumps_json(payload: Any, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(payload, indent=2, sort_keys=True)
    return json.dumps(payload, sort_keys=True)


def base_payload(kind: str, status: str, run_id: str) -> dict[str, object]:
    return {
        "schema_version": 1,
        "tool": "shellgate",
        "version": __version__,
        "kind": kind,
        "status": status,
        "run_id": run_id,
    }


def render_error(*, as_json: bool, message: str, code: int, kind: str = "generic_error", remedy: str = "", run_id: str = "") -> str:
    if as_json:
        return dumps_json(
            {
                "schema_version": 1,
                "tool": "shellgate",
                "status": "error",
                "run_id": run_id,
                "errors": [{"code": code, "kind": kind, "message": message, "remedy": remedy}],
            },
            pretty=False,
        )
    if remedy:
        return f"\n{message}\n\n  {remedy}\n"
    return message
