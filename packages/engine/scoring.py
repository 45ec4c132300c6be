"""
Mastermind scoring (feedback) for a (guess, solution) pair.

Conventions:
  - black : a guess peg with the same colour as the solution peg in the same position
  - white : a guess peg whose colour appears in the solution, but elsewhere

Algorithm (two counts, canonical for Mastermind):
  1) black = number of positions where the colours are equal.
  2) overlap = sum over colours of min(count in guess, count in solution);
     white = overlap - black.

The (black, white) pair is then mapped to one int via the mark table
(see marks.py).

Marks are symmetric, score(a, b) == score(b, a), so everything here evaluates
the numerically larger code against the smaller. That's what lets the full
table store only its lower triangle.

Three ways to get a mark, all returning identical values:
  - score(space, g, s)     : pure function, O(pegs + colours)
  - MarkCache(space)(g, s) : same, memoised per (max, min) pair
  - precompute_mark_table  : every pair up front in a flat numpy array
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np
from tqdm import tqdm

from .codes import CodeSpace
from .errors import ScoringRangeError, StructuralError
from .marks import MARK_TABLE, mark_count, mark_for

# Refuse to build tables bigger than this many codes (~50M int8 entries).
MAX_TABLE_CODES = 10_000


def score(space: CodeSpace, guess: int, solution: int) -> int:
    """
    Compute the mark for `guess` against `solution`.

    Examples (pegs=2, colours=2):
      score(AB, BA) -> 3   (0 black, 2 white)
      score(AA, AB) -> 1   (1 black)
      score(AB, AB) -> 4   (all black)
    """
    hi, lo = (guess, solution) if guess >= solution else (solution, guess)

    hi_pegs = space.decode(hi)
    lo_pegs = space.decode(lo)

    black = sum(1 for a, b in zip(hi_pegs, lo_pegs) if a == b)

    hi_freq = space.colour_frequency(hi)
    lo_freq = space.colour_frequency(lo)
    overlap = sum(min(n, lo_freq[c]) for c, n in hi_freq.items())

    return mark_for(black, overlap - black, space.pegs)


class MarkCache:
    """
    Memoising layer over `score`, keyed by the canonical (max, min) pair.

    Cheap to create; worth it when the same pairs come back again and again
    (every code checks the same opening guess, for instance).
    """

    def __init__(self, space: CodeSpace):
        self.space = space
        self._marks: Dict[Tuple[int, int], int] = {}
        self.hits = 0
        self.misses = 0

    def __call__(self, guess: int, solution: int) -> int:
        key = (guess, solution) if guess >= solution else (solution, guess)
        mark = self._marks.get(key)
        if mark is None:
            self.misses += 1
            mark = score(self.space, *key)
            self._marks[key] = mark
        else:
            self.hits += 1
        return mark

    def __len__(self) -> int:
        return len(self._marks)


class MarkMatrix:
    """
    Lower-triangular table of every mark, one flat int8 array.

    Row i holds the marks of code i against codes 0..i, starting at offset
    i*(i+1)/2.
    """

    def __init__(self, space: CodeSpace, flat: np.ndarray):
        self.space = space
        self.flat = flat

    @staticmethod
    def _offset(i: int) -> int:
        return i * (i + 1) // 2

    def __call__(self, guess: int, solution: int) -> int:
        hi, lo = (guess, solution) if guess >= solution else (solution, guess)
        return int(self.flat[self._offset(hi) + lo])

    def row(self, code: int) -> np.ndarray:
        """Marks of `code` against codes 0..code (a view, don't modify)."""
        start = self._offset(code)
        return self.flat[start:start + code + 1]


def precompute_mark_table(space: CodeSpace, progress: bool = False) -> MarkMatrix:
    """
    Score every unordered pair of codes (self-pairs included).

    O(codes^2 * pegs) time and O(codes^2) memory, so capped at MAX_TABLE_CODES.
    Each row is computed with numpy in one shot:
      black   = equal pegs per position, summed
      overlap = elementwise min of colour counts, summed
    """
    n = space.size
    if n > MAX_TABLE_CODES:
        raise StructuralError(
            f"mark table for {n} codes is too large (limit {MAX_TABLE_CODES}); "
            f"score on demand instead"
        )

    table = np.array(MARK_TABLE, dtype=np.int8)
    pegs = space.peg_matrix()
    freq = space.frequency_matrix()
    flat = np.empty(n * (n + 1) // 2, dtype=np.int8)
    limit = mark_count(space.pegs)

    rows = tqdm(range(n), ncols=80, desc="Marks", unit="code", disable=not progress)
    for i in rows:
        black = (pegs[: i + 1] == pegs[i]).sum(axis=1)
        overlap = np.minimum(freq[: i + 1], freq[i]).sum(axis=1)
        marks = table[black, overlap - black]
        bad = (marks < 0) | (marks >= limit)
        if bad.any():
            j = int(np.argmax(bad))
            raise ScoringRangeError(f"no mark for guess={j}, solution={i}")
        start = MarkMatrix._offset(i)
        flat[start:start + i + 1] = marks

    return MarkMatrix(space, flat)
