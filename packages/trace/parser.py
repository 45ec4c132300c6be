"""
Solution-trace parser.

What this module does:
- Read the comma-separated trace written by the solver, one line per code:

      #,Solution,Turns,Guess 1,Mark 1,Guess 2,Mark 2,...      (optional header)
      <code int>,<code text>,<turns>,<guess>,<mark>,<guess>,<mark>,...

- Work out the puzzle: pegs from the length of the first code's text,
  colours from the solver-style filename when there is one, else from the
  number of records (records == colours ** pegs for a complete trace).
- Turn each line into a Record (+ its Turns). Anything odd about a line's
  CONTENT becomes a flag on the record; only impossible STRUCTURE (too few
  fields, more turns than the header allows) aborts with StructuralError.

Typical use:
    from packages.trace import load_trace
    trace = load_trace("SolnMM(4,6)_full_282970100085955.csv")
    print(trace.pegs, trace.colours, len(trace.records))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from packages.engine import CodeSpace, MalformedCode, StructuralError, parse_mark

from .io import FileDims, parse_solution_filename, read_lines

DEFAULT_MAX_TURNS = 8     # used when there's no (usable) header
MAX_HEADER_TURNS = 10
HEADER_FIELDS = ("#", "Solution", "Turns")
MAX_INT_DIGITS = 9


# -----------------------------
# Dataclasses for parsed data
# -----------------------------

@dataclass
class Header:
    text: str
    well_formed: bool    # "#,Solution,Turns" + k (Guess i, Mark i) pairs, k <= 10
    max_turns: int       # k if well formed, else DEFAULT_MAX_TURNS


@dataclass
class Turn:
    """One (guess, mark) pair at a given ply (1-based)."""
    ply: int
    guess_text: str
    mark_text: str
    guess: Optional[int] = None           # None if guess_text isn't a code
    mark: Optional[int] = None            # None if mark_text isn't a mark
    guess_ok: bool = False                # guess is a well-formed code
    mark_ok: Optional[bool] = None        # mark == computed mark (None = not checked)
    expected_mark: Optional[int] = None   # computed mark, once checked
    guess_consistent: bool = True

    @property
    def mark_valid(self) -> bool:
        return self.mark is not None

    @property
    def has_problem(self) -> bool:
        return (not self.guess_ok or not self.mark_valid
                or self.mark_ok is False or not self.guess_consistent)


@dataclass
class Record:
    """One line of the trace: a code and the play that (supposedly) solves it."""
    line: int                       # index among data lines (header not counted)
    text: str                       # the line as read, for the annotated copy
    code: Optional[int]             # declared numeric code
    code_text: str                  # declared letter code
    claimed_turns: Optional[int]
    turns: List[Turn] = field(default_factory=list)
    # set by the parser
    code_ok: bool = False           # numeric and letter forms agree
    guesses_ok: bool = False        # guess/mark fields come in complete pairs
    # set by the verifier
    code_repeated: bool = False
    actual_turns: Optional[int] = None
    resolved: bool = False
    turns_ok: bool = False
    extra_turns: bool = False       # play continues after the all-black mark
    marks_ok: bool = True
    guess_consistent: bool = True

    def history(self) -> Tuple[Tuple[Optional[int], Optional[int]], ...]:
        return tuple((t.guess, t.mark) for t in self.turns)

    def issues(self) -> List[str]:
        """Failed checks, as short human-readable strings (empty == OK)."""
        out: List[str] = []
        if not self.code_ok:
            out.append("code mismatch")
        if self.code_repeated:
            out.append("duplicate code")
        if not self.guesses_ok:
            out.append("malformed guess/mark fields")
        if any(not t.guess_ok for t in self.turns):
            out.append("malformed guess")
        if any(not t.mark_valid for t in self.turns):
            out.append("malformed mark")
        if not self.resolved:
            out.append("unresolved")
        if not self.turns_ok:
            out.append("wrong turn count")
        if self.extra_turns:
            out.append("turns after solve")
        if not self.marks_ok:
            out.append("wrong mark")
        if not self.guess_consistent:
            out.append("inconsistent guess")
        return out

    @property
    def passed(self) -> bool:
        return not self.issues()


@dataclass
class Trace:
    """A parsed trace file plus the puzzle dimensions derived from it."""
    space: CodeSpace
    header: Optional[Header]
    max_turns: int
    records: List[Record]
    path: Optional[str] = None
    filename_dims: Optional[FileDims] = None
    inferred_colours: Optional[int] = None    # round(records ** (1/pegs))

    @property
    def pegs(self) -> int:
        return self.space.pegs

    @property
    def colours(self) -> int:
        return self.space.colours

    @property
    def expected_codes(self) -> int:
        return self.space.size

    @property
    def actual_codes(self) -> int:
        return len(self.records)

    @property
    def codes_ok(self) -> bool:
        return self.expected_codes == self.actual_codes

    @property
    def pegs_ok(self) -> bool:
        return self.filename_dims is None or self.filename_dims.pegs == self.pegs

    @property
    def colours_ok(self) -> bool:
        """Filename colours agree with the colours the record count implies."""
        if self.filename_dims is None:
            return True
        implied = self.colours if self.inferred_colours is None else self.inferred_colours
        return self.filename_dims.colours == implied


# -----------------------------
# Field-level helpers
# -----------------------------

def split_fields(line: str) -> List[str]:
    """Comma-split, trimming blanks; trailing empty fields are dropped."""
    fields = [f.strip() for f in line.split(",")]
    while len(fields) > 1 and not fields[-1]:
        fields.pop()
    return fields


def parse_int(text: str) -> Optional[int]:
    """Non-negative integer of 1..9 digits, else None."""
    if not 0 < len(text) <= MAX_INT_DIGITS or not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def _strip_brackets(text: str) -> str:
    if len(text) >= 2 and text[0] == "(" and text[-1] == ")":
        return text[1:-1]
    return text


# -----------------------------
# Public API
# -----------------------------

def parse_header(line: str) -> Optional[Header]:
    """
    Header info if `line` is a header (first field "#"), else None.

    A header that doesn't have the expected shape is still a header (it's
    skipped), it just doesn't tell us the maximum number of turns.
    """
    fields = split_fields(line)
    if fields[0] != HEADER_FIELDS[0]:
        return None

    n = len(fields)
    well_formed = (
            tuple(fields[:3]) == HEADER_FIELDS
            and n % 2 == 1
            and (n - 3) // 2 <= MAX_HEADER_TURNS
    )
    max_turns = (n - 3) // 2 if well_formed else DEFAULT_MAX_TURNS
    return Header(text=line, well_formed=well_formed, max_turns=max_turns)


def count_records(lines: Sequence[str]) -> int:
    """Non-blank lines, less the header if there is one."""
    data = [ln for ln in lines if ln.strip()]
    if data and parse_header(data[0]) is not None:
        return len(data) - 1
    return len(data)


def infer_pegs(line: str) -> int:
    """Pegs = length of the (unbracketed) code text in the first record."""
    fields = split_fields(line)
    if len(fields) < 2:
        raise StructuralError(f"first record has no code text: {line!r}")
    pegs = len(_strip_brackets(fields[1]))
    if pegs == 0:
        raise StructuralError(f"first record has an empty code: {line!r}")
    return pegs


def infer_colours(records: int, pegs: int) -> int:
    """Colours such that colours ** pegs is closest to the record count."""
    if records < 1:
        raise StructuralError("trace contains no records")
    return round(records ** (1.0 / pegs))


def parse_record(line: str, index: int, space: CodeSpace, max_turns: int) -> Record:
    """
    Parse one data line.

    Fields 0-2 are the numeric code, the letter code and the claimed turns.
    The rest are (guess, mark) pairs; a malformed guess or mark is kept as a
    flagged Turn and nothing after it is read.
    """
    fields = split_fields(line)
    if len(fields) < 3:
        raise StructuralError(f"record {index + 1}: expected at least 3 fields, got {len(fields)}")

    rest = fields[3:]
    pairs = len(rest) // 2
    if pairs > max_turns:
        raise StructuralError(
            f"record {index + 1}: {pairs} guesses but at most {max_turns} expected"
        )

    code = parse_int(fields[0])
    try:
        text_code: Optional[int] = space.text_to_code(fields[1])
    except MalformedCode:
        text_code = None

    rec = Record(
        line=index,
        text=line,
        code=code,
        code_text=fields[1],
        claimed_turns=parse_int(fields[2]),
        code_ok=(code is not None and code == text_code),
        guesses_ok=(len(rest) % 2 == 0),
    )

    for i in range(pairs):
        turn = Turn(ply=i + 1, guess_text=rest[2 * i], mark_text=rest[2 * i + 1])
        try:
            turn.guess = space.text_to_code(turn.guess_text)
            turn.guess_ok = True
        except MalformedCode:
            pass
        turn.mark = parse_mark(turn.mark_text, space.pegs)
        rec.turns.append(turn)

        # can't trust anything past the first bad field
        if not turn.guess_ok or not turn.mark_valid:
            break

    return rec


def parse_trace(lines: Sequence[str], filename: Path | str | None = None,
                colours: Optional[int] = None) -> Trace:
    """
    Parse a whole trace (already split into lines).

    Pegs always come from the data (a filename that disagrees only clears
    `pegs_ok`). Colours are taken from, in order:
      1) the `colours` argument,
      2) the filename, when it follows SolnMM(<pegs>,<colours>)_...,
      3) round(records ** (1/pegs)).
    An incomplete trace with a solver-style name is therefore checked against
    its real code space; `colours_ok` compares the filename's colours with
    the record-count estimate.
    """
    data = [ln for ln in lines if ln.strip()]
    if not data:
        raise StructuralError("trace is empty")

    header = parse_header(data[0])
    if header is not None:
        data = data[1:]
    n = count_records(lines)
    if n == 0:
        raise StructuralError("trace contains no records")

    max_turns = header.max_turns if header is not None else DEFAULT_MAX_TURNS
    pegs = infer_pegs(data[0])
    dims = None if filename is None else parse_solution_filename(filename)
    inferred = infer_colours(n, pegs)
    if colours is None:
        colours = dims.colours if dims is not None else inferred
    space = CodeSpace(pegs, colours)

    records = [parse_record(ln, i, space, max_turns) for i, ln in enumerate(data)]

    return Trace(
        space=space,
        header=header,
        max_turns=max_turns,
        records=records,
        path=None if filename is None else str(filename),
        filename_dims=dims,
        inferred_colours=inferred,
    )


def load_trace(path: Path | str, colours: Optional[int] = None) -> Trace:
    """Read and parse a trace file; any I/O problem is a StructuralError."""
    try:
        lines = read_lines(path)
    except FileNotFoundError as e:
        raise StructuralError(f"trace file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise StructuralError(f"cannot read trace file {path}: {e}") from e
    return parse_trace(lines, filename=path, colours=colours)
