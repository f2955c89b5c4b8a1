from __future__ import annotations

import pytest

from shellgate.classify import ProblemSets, classify
from shellgate.strategies import LintOutcome


def _outcomes(**diagnostics: str) -> dict[str, LintOutcome]:
    return {f"{name}.sh": LintOutcome(path=f"{name}.sh", diagnostic=diag) for name, diag in diagnostics.items()}


def test_allowlisted_failure_and_stale_pass() -> None:
    outcomes = _outcomes(a="SC2086: quote this", b="", c="")
    problems = classify({"a.sh", "b.sh", "c.sh"}, ["a.sh", "c.sh"], outcomes)
    assert problems.unexpected_failures == ()
    assert problems.stale_passes == ("c.sh",)
    assert problems.stale_entries == ()
    assert not problems.ok


def test_unexpected_failure_keeps_diagnostic() -> None:
    outcomes = _outcomes(a="", b="In b.sh line 3:\nSC2046")
    problems = classify(["a.sh", "b.sh"], [], outcomes)
    assert [o.path for o in problems.unexpected_failures] == ["b.sh"]
    assert problems.unexpected_failures[0].diagnostic == "In b.sh line 3:\nSC2046"


def test_stale_entry_for_missing_file() -> None:
    problems = classify(["a.sh"], ["d.sh"], _outcomes(a=""))
    assert problems.stale_entries == ("d.sh",)
    assert problems.stale_passes == ()
    assert problems.counts() == {"unexpected_failures": 0, "stale_passes": 0, "stale_entries": 1}


def test_all_clean_without_allowlist_is_ok() -> None:
    problems = classify(["a.sh", "b.sh"], [], _outcomes(a="", b=""))
    assert problems == ProblemSets()
    assert problems.ok


def test_failed_allowlisted_file_is_accepted() -> None:
    problems = classify(["a.sh"], ["a.sh"], _outcomes(a="SC1000"))
    assert problems.ok


def test_missing_outcome_is_rejected() -> None:
    with pytest.raises(ValueError, match="b.sh"):
        classify(["a.sh", "b.sh"], [], _outcomes(a=""))
