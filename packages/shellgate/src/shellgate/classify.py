from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .strategies import LintOutcome


@dataclass(frozen=True)
class ProblemSets:
    unexpected_failures: tuple[LintOutcome, ...] = ()
    stale_passes: tuple[str, ...] = ()
    stale_entries: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not (self.unexpected_failures or self.stale_passes or self.stale_entries)

    def counts(self) -> dict[str, int]:
        return {
            "unexpected_failures": len(self.unexpected_failures),
            "stale_passes": len(self.stale_passes),
            "stale_entries": len(self.stale_entries),
        }


def classify(
    discovered: Iterable[str],
    allowed: Iterable[str],
    outcomes: Mapping[str, LintOutcome],
) -> ProblemSets:
    """Partition lint outcomes against the allow-list.

    | outcome | allow-listed | result              |
    |---------|--------------|---------------------|
    | failed  | no           | unexpected failure  |
    | failed  | yes          | accepted            |
    | clean   | yes          | stale pass          |
    | clean   | no           | accepted            |

    Allow-list entries that were not discovered are stale entries regardless
    of any outcome.
    """
    scripts = frozenset(discovered)
    allow = frozenset(allowed)
    missing = sorted(script for script in scripts if script not in outcomes)
    if missing:
        raise ValueError(f"no lint outcome for discovered scripts: {', '.join(missing)}")
    failures: list[LintOutcome] = []
    stale_passes: list[str] = []
    for script in sorted(scripts):
        outcome = outcomes[script]
        if outcome.failed and script not in allow:
            failures.append(outcome)
        elif outcome.clean and script in allow:
            stale_passes.append(script)
    return ProblemSets(
        unexpected_failures=tuple(failures),
        stale_passes=tuple(stale_passes),
        stale_entries=tuple(sorted(allow - scripts)),
    )
