from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from .env import getenv
from .git import find_repo_root

OutputFormat = Literal["text", "json"]
NetworkMode = Literal["allow", "forbid"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    repo_root: Path
    output_format: OutputFormat = "text"
    network_mode: NetworkMode = "allow"
    verbose: bool = False
    quiet: bool = False
    log_json: bool = False

    @property
    def no_network(self) -> bool:
        return self.network_mode == "forbid"

    @property
    def as_json(self) -> bool:
        return self.output_format == "json"

    @classmethod
    def from_args(
        cls,
        repo_root: str | None,
        run_id: str | None = None,
        output_format: OutputFormat = "text",
        network_mode: NetworkMode = "allow",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
    ) -> "RunContext":
        root = Path(repo_root).resolve() if repo_root else find_repo_root()
        default_run = f"shellgate-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}"
        return cls(
            run_id=run_id or getenv("RUN_ID", default_run) or default_run,
            repo_root=root,
            output_format=output_format,
            network_mode=network_mode,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
        )
