from __future__ import annotations

from pathlib import Path

from shellgate.config import Settings
from shellgate.core.context import RunContext
from shellgate.strategies import ExecutionStrategy, LintOutcome


class FakeStrategy(ExecutionStrategy):
    """Returns canned diagnostics instead of running shellcheck."""

    name = "fake"

    def __init__(self, ctx: RunContext, settings: Settings, diagnostics: dict[str, str] | None = None) -> None:
        super().__init__(ctx, settings)
        self.diagnostics = diagnostics or {}
        self.calls: list[str] = []

    def describe(self) -> str:
        return "Using fake shellcheck."

    def run(self, script: str) -> LintOutcome:
        self.calls.append(script)
        diagnostic = self.diagnostics.get(script, "")
        return LintOutcome(path=script, diagnostic=diagnostic, exit_code=1 if diagnostic else 0)


def write_files(root: Path, files: dict[str, str] | list[str]) -> None:
    items = files.items() if isinstance(files, dict) else ((name, "#!/usr/bin/env bash\necho ok\n") for name in files)
    for rel, content in items:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def write_allowlist(root: Path, entries: list[str], rel: str = "hack/.shellcheck_failures") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{entry}\n" for entry in entries), encoding="utf-8")
    return path


def no_ignores(_rel: str) -> bool:
    return False


def write_executable(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    path.chmod(0o755)
    return path
