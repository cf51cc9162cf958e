from __future__ import annotations

import pytest

from merge_chain.core.branches import ChapterRange, branch_name, parse_branch_id
from merge_chain.errors import ChainValidationError


def test_branch_name():
    assert branch_name(0) == "ch0"
    assert branch_name(12) == "ch12"


@pytest.mark.parametrize("value,expected", [("0", 0), ("7", 7), (" 3 ", 3), ("08", 8), (5, 5)])
def test_parse_branch_id_accepts_digits(value, expected):
    assert parse_branch_id(value) == expected


@pytest.mark.parametrize("value", ["-1", "3a", "", "1.5", "ch3", -2])
def test_parse_branch_id_rejects_non_numeric(value):
    with pytest.raises(ChainValidationError, match="must be numeric"):
        parse_branch_id(value)


def test_merge_range_requires_start_below_end():
    assert ChapterRange.for_merge("3", "5") == ChapterRange(3, 5)
    with pytest.raises(ChainValidationError, match="less than end"):
        ChapterRange.for_merge("5", "5")
    with pytest.raises(ChainValidationError):
        ChapterRange.for_merge("6", "5")


def test_transfer_range_allows_single_branch():
    chapter_range = ChapterRange.for_transfer("4", "4")
    assert chapter_range.branches() == ["ch4"]
    with pytest.raises(ChainValidationError, match="less than or equal"):
        ChapterRange.for_transfer("5", "4")


def test_range_iterates_inclusively():
    chapter_range = ChapterRange(2, 5)
    assert list(chapter_range) == [2, 3, 4, 5]
    assert len(chapter_range) == 4
    assert chapter_range.branches() == ["ch2", "ch3", "ch4", "ch5"]
