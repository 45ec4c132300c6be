"""
Code model for Mastermind-style puzzles.

A code is an integer in [0, colours ** pegs). Peg 0 is the least-significant
digit in base `colours`, so enumeration increments peg 0 first and carries
into peg 1, and so on:

    pegs=2, colours=2  ->  0=AA, 1=AB, 2=BA, 3=BB

Storage order is least-significant-first, but the text form is written
most-significant peg first (that's why code 1 reads "AB").

A code shown in brackets, e.g. "(ABCD)", is one the solver used as a guess
without it being a possible answer at that point. The brackets carry no
information for the checker and are stripped when parsing.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List

import numpy as np

from .errors import MalformedCode, StructuralError

MAX_PEGS = 10
MAX_COLOURS = 10


@dataclass(frozen=True)
class CodeSpace:
    """All codes for one (pegs, colours) puzzle."""
    pegs: int
    colours: int

    def __post_init__(self):
        if not 1 <= self.pegs <= MAX_PEGS:
            raise StructuralError(f"pegs must be in 1..{MAX_PEGS}; got {self.pegs}")
        if not 1 <= self.colours <= MAX_COLOURS:
            raise StructuralError(f"colours must be in 1..{MAX_COLOURS}; got {self.colours}")

    @property
    def size(self) -> int:
        return self.colours ** self.pegs

    @property
    def all_black(self) -> int:
        """Mark value of an exact match for this number of pegs."""
        return self.pegs * (self.pegs + 3) // 2 - 1

    def enumerate_codes(self) -> range:
        """Every code, in canonical order (a lazy sequence of `size` ints)."""
        return range(self.size)

    def decode(self, code: int) -> List[int]:
        """Peg colours of `code`, peg 0 first."""
        pegs: List[int] = []
        for _ in range(self.pegs):
            code, colour = divmod(code, self.colours)
            pegs.append(colour)
        return pegs

    def colour_frequency(self, code: int) -> Counter:
        """How many times each colour appears in `code`."""
        return Counter(self.decode(code))

    def text_to_code(self, text: str) -> int:
        """
        Parse the letter form of a code, e.g. "ABBA" or "(ABBA)".

        Raises MalformedCode unless the text (after removing ONE symmetric
        bracket pair) is exactly `pegs` letters in [A, A+colours).
        """
        body = text
        if body.startswith("(") or body.endswith(")"):
            if not (body.startswith("(") and body.endswith(")")):
                raise MalformedCode(f"unbalanced brackets in code {text!r}")
            body = body[1:-1]

        if len(body) != self.pegs:
            raise MalformedCode(f"code {text!r} must have {self.pegs} pegs")

        code = 0
        for ch in body:  # most-significant peg first
            colour = ord(ch) - ord("A")
            if not 0 <= colour < self.colours:
                raise MalformedCode(f"invalid colour {ch!r} in code {text!r}")
            code = code * self.colours + colour
        return code

    def code_to_text(self, code: int, offered: bool = True) -> str:
        """Letter form, most-significant peg first; bracketed when not `offered`."""
        if not 0 <= code < self.size:
            raise ValueError(f"code {code} outside 0..{self.size - 1}")
        text = "".join(chr(ord("A") + c) for c in reversed(self.decode(code)))
        return text if offered else f"({text})"

    # --- vectorised views (used by the precomputed mark table) ---

    def peg_matrix(self) -> np.ndarray:
        """(size, pegs) array; row i is decode(i)."""
        codes = np.arange(self.size, dtype=np.int64)
        place = self.colours ** np.arange(self.pegs, dtype=np.int64)
        return (codes[:, None] // place[None, :]) % self.colours

    def frequency_matrix(self) -> np.ndarray:
        """(size, colours) array; row i counts each colour in code i."""
        pegs = self.peg_matrix()
        return (pegs[:, :, None] == np.arange(self.colours)).sum(axis=1)
