"""
Consistency checks over a parsed solution trace.

- check_codes:   every code appears exactly once (sorted-by-code scan).
- check_counts:  the claimed turn count is the ply of the first all-black mark.
- check_guesses: the trace follows ONE strategy; codes with the same history
                 of (guess, mark) pairs get the same next guess.
- check_marks:   every stated mark is what scoring actually gives.

No decision tree is ever built. A strategy is a tree, but a tree's paths are
exactly the records' histories, so sorting the records by history puts every
subtree in one contiguous run. Checking "same history => same next guess" is
then a scan comparing neighbours, O(n log n) overall.

Passes only ever SET flags on records (each pass resets its own flags first)
and sort into new lists, so trace.records keeps file order and running the
whole thing twice gives identical results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import groupby
from typing import Callable, List, Optional, Tuple

from tqdm import tqdm

from packages.engine import CodeSpace, MarkCache, all_black_mark
from packages.trace import Record, Trace

# marker(guess, solution) -> mark; score, MarkCache and MarkMatrix all fit
Marker = Callable[[int, int], int]


@dataclass(frozen=True)
class MissingEntry:
    code: int
    text: str


@dataclass
class Verification:
    records: List[Record]                                      # file order
    missing: List[MissingEntry] = field(default_factory=list)  # ascending code

    @property
    def failed(self) -> List[Record]:
        return [r for r in self.records if not r.passed]

    @property
    def passed(self) -> bool:
        return not self.missing and not self.failed


def _or_minus(v: Optional[int]) -> int:
    return -1 if v is None else v


def check_codes(records: List[Record], space: CodeSpace) -> List[MissingEntry]:
    """
    Flag repeated codes and list the ones that never appear.

    Walk the records in code order tracking the next code we expect to see:
      - code == expected      -> fine, expect code + 1
      - code == previous code -> duplicate
      - code >  expected      -> everything in [expected, code) is missing
    Codes that didn't parse or are out of range are skipped here; the record
    already fails on its code mismatch.
    """
    missing: List[int] = []
    expected = 0
    prev: Optional[int] = None

    for rec in sorted(records, key=lambda r: _or_minus(r.code)):
        rec.code_repeated = False
        code = rec.code
        if code is None or code >= space.size:
            continue

        if code == expected:
            expected += 1
        elif code == prev:
            rec.code_repeated = True
        elif code > expected:
            missing.extend(range(expected, code))
            expected = code + 1
        prev = code

    # did the trace stop early?
    missing.extend(range(expected, space.size))
    return [MissingEntry(c, space.code_to_text(c)) for c in missing]


def check_counts(records: List[Record], pegs: int) -> None:
    """Find the first all-black ply and compare with the claimed turn count."""
    solved = all_black_mark(pegs)

    for rec in records:
        rec.actual_turns = None
        rec.resolved = False
        rec.turns_ok = False
        rec.extra_turns = False

        for turn in rec.turns:
            if turn.mark == solved:
                rec.actual_turns = turn.ply
                rec.resolved = True
                rec.turns_ok = (rec.claimed_turns == turn.ply)
                rec.extra_turns = len(rec.turns) > turn.ply
                break


def _history_key(rec: Record) -> Tuple[Tuple[int, int], ...]:
    # Per ply: mark first, then guess. With a consistent strategy the guess is
    # fixed by the earlier marks, so this is plain mark order; when guesses
    # diverge, the guess keeps identical histories next to each other.
    return tuple((_or_minus(t.mark), _or_minus(t.guess)) for t in rec.turns)


def check_guesses(records: List[Record]) -> None:
    """
    Flag guesses that break "same history => same next guess".

    For ply k, records whose first k-1 (guess, mark) pairs are identical sit
    in one run of the history-sorted list. The first record of a run sets the
    guess for ply k and every record after it that guesses differently is
    flagged. At ply 1 the shared history is empty, so every record is compared
    with the first one in history order.
    """
    for rec in records:
        rec.guess_consistent = True
        for turn in rec.turns:
            turn.guess_consistent = True

    ordered = sorted(records, key=_history_key)
    histories = [rec.history() for rec in ordered]
    depth = max((len(h) for h in histories), default=0)

    for ply in range(1, depth + 1):
        # malformed guesses are flagged already; leave them out
        playing = [
            (rec, hist[: ply - 1])
            for rec, hist in zip(ordered, histories)
            if len(hist) >= ply and rec.turns[ply - 1].guess_ok
        ]

        for _, run in groupby(playing, key=lambda pair: pair[1]):
            members = [rec for rec, _ in run]
            agreed = members[0].turns[ply - 1].guess
            for rec in members[1:]:
                turn = rec.turns[ply - 1]
                if turn.guess != agreed:
                    turn.guess_consistent = False
                    rec.guess_consistent = False


def check_marks(records: List[Record], space: CodeSpace, marker: Marker,
                progress: bool = False) -> None:
    """
    Re-score every turn up to the solving ply (all turns if never solved).

    Turns with a malformed guess or mark, and records whose numeric code
    can't be scored, aren't compared: those already fail on their own flags.
    """
    for rec in tqdm(records, ncols=80, desc="Marks", unit="code", disable=not progress):
        rec.marks_ok = True
        for turn in rec.turns:
            turn.mark_ok = None
            turn.expected_mark = None

        if rec.code is None or rec.code >= space.size:
            continue

        checked = rec.turns[: rec.actual_turns] if rec.resolved else rec.turns
        for turn in checked:
            if not turn.guess_ok:
                continue
            turn.expected_mark = marker(turn.guess, rec.code)
            if not turn.mark_valid:
                continue
            turn.mark_ok = (turn.mark == turn.expected_mark)
            if not turn.mark_ok:
                rec.marks_ok = False


def verify(trace: Trace, marker: Marker | None = None, progress: bool = False) -> Verification:
    """
    Run all four checks over `trace` (in place) and collect the results.

    All checks always run: problems found by one never stop the others.
    `marker` defaults to an on-demand MarkCache.
    """
    if marker is None:
        marker = MarkCache(trace.space)

    missing = check_codes(trace.records, trace.space)
    check_counts(trace.records, trace.pegs)
    check_guesses(trace.records)
    check_marks(trace.records, trace.space, marker, progress=progress)

    return Verification(records=trace.records, missing=missing)
