"""Git collaborator: repository root detection and the ignore oracle."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from ..errors import DiscoveryError
from .process import run_command

IgnoreOracle = Callable[[str], bool]


def find_repo_root(start: Path | None = None) -> Path:
    cwd = (start or Path.cwd()).resolve()
    if cwd.is_file():
        cwd = cwd.parent
    res = run_command(["git", "rev-parse", "--show-toplevel"], cwd)
    if res.code != 0 or not res.stdout.strip():
        raise DiscoveryError(
            f"not a git repository: unable to resolve the work tree from {cwd}: {res.combined_output or 'no output'}",
            remedy="run from inside a git checkout or pass --repo-root",
        )
    return Path(res.stdout.strip()).resolve()


class GitIgnoreOracle:
    """Answers `git check-ignore` for paths relative to `repo_root`, one query per path.

    `repo_root` may be any directory inside a work tree; construction fails outside one.
    """

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root
        self.work_tree = find_repo_root(repo_root)

    def __call__(self, rel_path: str) -> bool:
        res = run_command(["git", "check-ignore", "-q", "--", rel_path], self.repo_root)
        # 0: ignored, 1: not ignored, anything else is a fatal git error
        if res.code == 0:
            return True
        if res.code == 1:
            return False
        raise DiscoveryError(
            f"git check-ignore failed for {rel_path} in {self.repo_root}: {res.combined_output}",
            remedy="make sure the repository root is a git work tree",
        )
