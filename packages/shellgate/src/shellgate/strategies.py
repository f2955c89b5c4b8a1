"""Execution strategies: how a single shellcheck invocation is carried out.

Every strategy exposes ``run(script) -> LintOutcome``. Local strategies spawn
the binary once per file; the sandbox strategy ``exec``s into an already
running container once per file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .core.process import run_command

if TYPE_CHECKING:
    from .config import Settings
    from .core.context import RunContext


@dataclass(frozen=True)
class LintOutcome:
    path: str
    diagnostic: str = ""
    exit_code: int = 0

    @property
    def failed(self) -> bool:
        # empty output means clean, whatever the exit code
        return bool(self.diagnostic)

    @property
    def clean(self) -> bool:
        return not self.failed


def shellcheck_options(settings: Settings) -> list[str]:
    options = [
        # each file is linted on its own, so sourced files must be followed
        "--external-sources",
        "--color=auto",
    ]
    codes = [code.upper().removeprefix("SC") for code in settings.disabled_codes]
    if codes:
        options.insert(1, f"--exclude={','.join(codes)}")
    return options


class ExecutionStrategy:
    name = "abstract"

    def __init__(self, ctx: RunContext, settings: Settings) -> None:
        self.ctx = ctx
        self.settings = settings
        self.options = shellcheck_options(settings)

    def command(self, script: str) -> list[str]:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def run(self, script: str) -> LintOutcome:
        result = run_command(
            self.command(script),
            self.ctx.repo_root,
            timeout_seconds=self.settings.timeout_seconds,
            ctx=self.ctx,
        )
        return LintOutcome(path=script, diagnostic=result.combined_output, exit_code=result.code)


class HostBinary(ExecutionStrategy):
    name = "host"

    def __init__(self, ctx: RunContext, settings: Settings, binary: Path) -> None:
        super().__init__(ctx, settings)
        self.binary = binary

    def command(self, script: str) -> list[str]:
        return [str(self.binary), *self.options, script]

    def describe(self) -> str:
        return f"Using host shellcheck {self.settings.shellcheck_version} binary."


class DownloadedBinary(HostBinary):
    name = "download"

    def describe(self) -> str:
        return f"Using shellcheck {self.settings.shellcheck_version} precompiled binary ({self.binary})."


class Sandbox(ExecutionStrategy):
    name = "sandbox"

    def __init__(self, ctx: RunContext, settings: Settings, container: str, tty: bool = False) -> None:
        super().__init__(ctx, settings)
        self.container = container
        self.tty = tty

    def command(self, script: str) -> list[str]:
        cmd = [self.settings.container_runtime, "exec"]
        if self.tty:
            cmd.append("-t")
        return [*cmd, self.container, "shellcheck", *self.options, script]

    def describe(self) -> str:
        return f"Using shellcheck {self.settings.shellcheck_version} docker image."
