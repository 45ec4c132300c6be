"""
Exception taxonomy for the checker.

- StructuralError:   fatal. The trace cannot be checked at all (unreadable file,
                     field counts over the configured maxima, tables too large).
- ScoringRangeError: fatal. A (black, white) pair fell outside the mark table,
                     which only happens with corrupted code definitions.
- MalformedCode:     a code's text form is not a valid code. The parser catches
                     it and records a flag instead of aborting.

Data inconsistencies (wrong marks, duplicate codes, ...) are never exceptions;
they are flags on the parsed records.
"""


class StructuralError(Exception):
    """The trace (or the puzzle it describes) cannot be processed."""


class ScoringRangeError(StructuralError):
    """Black/white counts not supported by the mark table."""


class MalformedCode(ValueError):
    """Text does not spell a code for the current (pegs, colours)."""
