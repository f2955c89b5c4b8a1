"""Shell script discovery.

Candidates are regular files with a configured suffix. Paths matching an
exclude glob are dropped unless they also match an include glob, then every
survivor is checked against the git ignore oracle.
"""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

from .config import Settings
from .core.git import GitIgnoreOracle, IgnoreOracle
from .errors import DiscoveryError


def _matches(rel: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatch.fnmatchcase(rel, pattern) for pattern in patterns)


def is_excluded(rel: str, settings: Settings) -> bool:
    return _matches(rel, settings.exclude) and not _matches(rel, settings.include)


def _prunable(rel_dir: str, settings: Settings) -> bool:
    if not is_excluded(rel_dir, settings):
        return False
    prefix = rel_dir + "/"
    return not any(pattern.startswith(prefix) for pattern in settings.include)


def iter_candidates(repo_root: Path, settings: Settings) -> list[str]:
    out: list[str] = []
    for dirpath, dirnames, filenames in os.walk(repo_root):
        base = Path(dirpath).relative_to(repo_root)
        kept = []
        for name in sorted(dirnames):
            rel_dir = (base / name).as_posix()
            if not _prunable(rel_dir, settings):
                kept.append(name)
        dirnames[:] = kept
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.suffix not in settings.extensions:
                continue
            if path.is_symlink() or not path.is_file():
                continue
            rel = (base / name).as_posix()
            if not is_excluded(rel, settings):
                out.append(rel)
    return out


def discover_scripts(
    repo_root: Path,
    settings: Settings,
    is_ignored: IgnoreOracle | None = None,
) -> tuple[str, ...]:
    if not repo_root.is_dir():
        raise DiscoveryError(f"repository root is not a directory: {repo_root}")
    oracle = is_ignored or GitIgnoreOracle(repo_root)
    return tuple(rel for rel in iter_candidates(repo_root, settings) if not oracle(rel))
