"""
Mark numbering.

A mark is the (black, white) feedback for a guess, stored as one small int.
The numbering comes from a fixed triangular table chosen so that:

  1) puzzles with fewer pegs use a lower, contiguous range of marks
     (pegs=p uses exactly 0 .. p*(p+3)/2 - 1);
  2) for a given peg count the all-black mark is the HIGHEST mark in range.

So "solved" is always `mark == pegs*(pegs+3)//2 - 1`, whatever the puzzle.

Text form: black pegs as 'b' followed by white pegs as 'w' ("bbw"), or a
single '-' when nothing scored. Parsing is case-insensitive.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .errors import ScoringRangeError

XX = -1  # impossible (black, white) combination

# MARK_TABLE[black][white]
MARK_TABLE: List[List[int]] = [
    [0, 2, 3, 5, 9, 14, 20, 27, 35, 44, 54],
    [1, 6, 7, 10, 15, 21, 28, 36, 45, 55, XX],
    [4, 11, 12, 16, 22, 29, 37, 46, 56, XX, XX],
    [8, 17, 18, 23, 30, 38, 47, 57, XX, XX, XX],
    [13, 24, 25, 31, 39, 48, 58, XX, XX, XX, XX],
    [19, 32, 33, 40, 49, 59, XX, XX, XX, XX, XX],
    [26, 41, 42, 50, 60, XX, XX, XX, XX, XX, XX],
    [34, 51, 52, 61, XX, XX, XX, XX, XX, XX, XX],
    [43, 62, 63, XX, XX, XX, XX, XX, XX, XX, XX],
    [53, XX, XX, XX, XX, XX, XX, XX, XX, XX, XX],
    [64, XX, XX, XX, XX, XX, XX, XX, XX, XX, XX],
]

# mark -> (black, white)
_MARK_PEGS: Dict[int, Tuple[int, int]] = {
    m: (b, w)
    for b, row in enumerate(MARK_TABLE)
    for w, m in enumerate(row)
    if m != XX
}


def mark_count(pegs: int) -> int:
    """Number of distinct marks for a puzzle with `pegs` pegs."""
    return pegs * (pegs + 3) // 2


def all_black_mark(pegs: int) -> int:
    return mark_count(pegs) - 1


def mark_for(black: int, white: int, pegs: int) -> int:
    """
    Table lookup for a (black, white) outcome.

    Raises ScoringRangeError if the pair can't occur with `pegs` pegs
    (negative counts, more scoring pegs than pegs, or a cell outside the
    range for `pegs`).
    """
    if black < 0 or white < 0 or black + white > pegs:
        raise ScoringRangeError(f"black={black}, white={white} impossible with {pegs} pegs")
    if black >= len(MARK_TABLE) or white >= len(MARK_TABLE[black]):
        raise ScoringRangeError(f"black={black}, white={white} outside mark table")
    mark = MARK_TABLE[black][white]
    # (pegs-1 black, 1 white) has a cell, but it belongs to bigger puzzles
    if mark == XX or mark >= mark_count(pegs):
        raise ScoringRangeError(f"black={black}, white={white} has no mark for {pegs} pegs")
    return mark


def parse_mark(text: str, pegs: int) -> Optional[int]:
    """
    Mark value for a text mark, or None if the text is not a mark.

    Accepted: zero or more b/B then zero or more w/W (empty == nothing scored),
    or the lone "-". A well-formed mark that can't occur for `pegs` (e.g. "bw"
    with 2 pegs) still parses; the marking check catches it later.
    """
    if text == "-":
        return MARK_TABLE[0][0]

    lowered = text.lower()
    black = len(lowered) - len(lowered.lstrip("b"))
    rest = lowered[black:]
    white = len(rest)
    if rest != "w" * white:
        return None
    if black + white > pegs:
        return None

    mark = MARK_TABLE[black][white]
    return None if mark == XX else mark


def mark_to_text(mark: int) -> str:
    """"bbw"-style text for a mark value ("-" for no score)."""
    try:
        black, white = _MARK_PEGS[mark]
    except KeyError as e:
        raise ValueError(f"unknown mark value: {mark}") from e
    return ("b" * black + "w" * white) or "-"
