"""Chapter branch naming and range validation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from merge_chain.errors import ChainValidationError

BRANCH_PREFIX = "ch"

_NUMERIC = re.compile(r"^[0-9]+$")


def branch_name(index: int) -> str:
    """Return the branch name for chapter ``index`` (``3`` -> ``ch3``)."""
    return f"{BRANCH_PREFIX}{index}"


def parse_branch_id(value: str | int) -> int:
    """Parse a chapter id given on the command line.

    Only plain non-negative decimal digits are accepted.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise ChainValidationError("Branch numbers must be numeric")
        return value
    text = str(value).strip()
    if not _NUMERIC.match(text):
        raise ChainValidationError("Branch numbers must be numeric")
    return int(text)


@dataclass(frozen=True)
class ChapterRange:
    """Inclusive interval of chapter indices."""

    start: int
    end: int

    @classmethod
    def for_merge(cls, start: str | int, end: str | int) -> "ChapterRange":
        """Validate a range for chain merging (``start < end``)."""
        chapter_range = cls(parse_branch_id(start), parse_branch_id(end))
        if chapter_range.start >= chapter_range.end:
            raise ChainValidationError(
                "Start branch number must be less than end branch number"
            )
        return chapter_range

    @classmethod
    def for_transfer(cls, start: str | int, end: str | int) -> "ChapterRange":
        """Validate a range for sync/push (``start <= end``)."""
        chapter_range = cls(parse_branch_id(start), parse_branch_id(end))
        if chapter_range.start > chapter_range.end:
            raise ChainValidationError(
                "Start branch number must be less than or equal to end branch number"
            )
        return chapter_range

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return self.end - self.start + 1

    def branches(self) -> list[str]:
        return [branch_name(i) for i in self]
