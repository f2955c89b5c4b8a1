from __future__ import annotations

import difflib
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

from .errors import UnsortedAllowListError


def byte_order(entries: list[str] | tuple[str, ...]) -> list[str]:
    """Sort like `LC_ALL=C sort -u`: byte-wise, duplicates dropped."""
    return sorted(set(entries), key=lambda entry: entry.encode("utf-8"))


def normalize_entry(line: str) -> str:
    """Map an allow-list line to the discovered path form (`./hack/a.sh` -> `hack/a.sh`)."""
    return line.strip().removeprefix("./")


@dataclass(frozen=True)
class AllowList:
    """Scripts with accepted, pre-existing lint failures, in file order.

    ``entries`` holds normalised paths used for membership. ``lines`` holds the
    file exactly as written and is what the sort check looks at, so the check
    agrees with `LC_ALL=C sort -u` run on the file itself.
    """

    path: Path
    entries: tuple[str, ...]
    lines: tuple[str, ...] | None = None

    @classmethod
    def load(cls, path: Path) -> "AllowList":
        if not path.is_file():
            return cls(path=path, entries=(), lines=())
        lines = tuple(path.read_text(encoding="utf-8").splitlines())
        return cls(
            path=path,
            entries=tuple(normalize_entry(line) for line in lines if line.strip()),
            lines=lines,
        )

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    @property
    def raw_lines(self) -> tuple[str, ...]:
        return self.entries if self.lines is None else self.lines

    @cached_property
    def members(self) -> frozenset[str]:
        return frozenset(self.entries)

    def __contains__(self, script: object) -> bool:
        return script in self.members

    def __len__(self) -> int:
        return len(self.entries)

    def malformed_lines(self) -> list[int]:
        """1-based numbers of blank lines and lines with surrounding whitespace."""
        return [n for n, line in enumerate(self.raw_lines, start=1) if not line.strip() or line != line.strip()]

    def sorted_entries(self) -> list[str]:
        return byte_order([line.strip() for line in self.raw_lines if line.strip()])

    def is_sorted(self) -> bool:
        return not self.malformed_lines() and list(self.raw_lines) == self.sorted_entries()

    def diff_lines(self) -> list[str]:
        return list(
            difflib.unified_diff(
                list(self.raw_lines),
                self.sorted_entries(),
                fromfile=str(self.path),
                tofile=f"{self.path} (sorted)",
                lineterm="",
            )
        )

    def check_sorted(self) -> None:
        if self.is_sorted():
            return
        malformed = self.malformed_lines()
        if malformed:
            numbers = ", ".join(str(n) for n in malformed)
            raise UnsortedAllowListError(
                f"{self.path} has blank or whitespace-padded lines ({numbers}). "
                "Each line must be exactly one path:",
                remedy=(
                    f"sed -i -e 's/^[[:space:]]*//' -e 's/[[:space:]]*$//' -e '/^$/d' {self.path} "
                    f"&& LC_ALL=C sort -u -o {self.path} {self.path}"
                ),
                expected=tuple(self.sorted_entries()),
            )
        diff = "\n".join(self.diff_lines())
        raise UnsortedAllowListError(
            f"{diff}\n\n{self.path} is not in alphabetical order. Please sort it:",
            remedy=f"LC_ALL=C sort -u -o {self.path} {self.path}",
            expected=tuple(self.sorted_entries()),
        )
