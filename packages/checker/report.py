"""
Reporting for a checked trace.

What this module does:
- Fold the per-record flags and the file-level cross-checks into one
  CheckReport (dataclass; `as_dict()` for JSON manifests).
- Produce the console output: a one-line summary, then either
  "No errors found. TTTS = N" or the list of problems.
- Produce the annotated copy of the trace: every line prefixed with
  "OK,," or "ERR,<issues>,", plus a marker line under any line whose
  individual guesses or marks are wrong.

Typical use:
    trace = load_trace(path)
    result = verify(trace)
    rep = build_report(trace, result)
    print(pretty_summary(rep))
    for line in summary_lines(rep):
        print(line)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from packages.engine import mark_to_text
from packages.trace import Record, Trace

from .verifier import Verification


@dataclass
class CheckReport:
    """Everything the console and the manifest need to know about one run."""
    path: Optional[str]
    pegs: int
    colours: int
    expected_codes: int
    actual_codes: int
    max_turns: int
    # file-level cross-checks
    pegs_ok: bool          # filename pegs agree with the data (True if no filename dims)
    colours_ok: bool       # same for colours
    codes_ok: bool         # colours ** pegs == number of records
    missing: List[str]     # codes never solved, ascending, letter form
    # record level
    failed_records: int
    # solver metrics over resolved records
    ttts: int              # total turns to solve
    mtts: int              # maximum turns to solve
    distribution: List[int]  # distribution[i] = codes solved in i+1 turns
    average: float
    passed: bool
    file_issues: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)   # advisory only
    errors_path: Optional[str] = None

    def as_dict(self) -> Dict:
        return asdict(self)


def _file_issues(trace: Trace, missing: List[str]) -> List[str]:
    issues: List[str] = []
    dims = trace.filename_dims
    if not trace.pegs_ok:
        issues.append(f"filename says {dims.pegs} pegs but codes have {trace.pegs}")
    if not trace.colours_ok:
        issues.append(
            f"filename says {dims.colours} colours but {trace.actual_codes} records "
            f"imply {trace.inferred_colours}"
        )
    if not trace.codes_ok:
        issues.append(
            f"expected {trace.expected_codes} codes ({trace.colours}^{trace.pegs}), "
            f"found {trace.actual_codes}"
        )
    if missing:
        issues.append(f"{len(missing)} code(s) missing")
    return issues


def _notes(trace: Trace) -> List[str]:
    notes: List[str] = []
    if trace.header is None:
        notes.append(f"no header; assuming at most {trace.max_turns} turns")
    elif not trace.header.well_formed:
        notes.append(f"header not recognised; assuming at most {trace.max_turns} turns")
    if trace.path is not None and trace.filename_dims is None:
        notes.append("filename does not encode (pegs,colours); dimensions taken from the data")
    return notes


def build_report(trace: Trace, result: Verification) -> CheckReport:
    """Summarise a verified trace."""
    missing = [m.text for m in result.missing]
    failed = len(result.failed)

    solved = [r.actual_turns for r in trace.records if r.resolved]
    ttts = sum(solved)
    mtts = max(solved, default=0)
    hist = Counter(solved)
    distribution = [hist.get(t, 0) for t in range(1, mtts + 1)]
    average = ttts / len(solved) if solved else 0.0

    file_issues = _file_issues(trace, missing)
    dims = trace.filename_dims

    return CheckReport(
        path=trace.path,
        pegs=trace.pegs,
        colours=trace.colours,
        expected_codes=trace.expected_codes,
        actual_codes=trace.actual_codes,
        max_turns=trace.max_turns,
        pegs_ok=trace.pegs_ok,
        colours_ok=trace.colours_ok,
        codes_ok=trace.codes_ok,
        missing=missing,
        failed_records=failed,
        ttts=ttts,
        mtts=mtts,
        distribution=distribution,
        average=round(average, 4),
        passed=(not file_issues and failed == 0),
        file_issues=file_issues,
        notes=_notes(trace) + ([f"algorithm: {dims.algorithm}"] if dims else []),
    )


def pretty_summary(report: CheckReport) -> str:
    """
    Compact one-liner for the console.

    Example:
        pegs=4 | colours=6 | codes=1296/1296 | max_turns=8 | TTTS=5801 | OK
    """
    status = "OK" if report.passed else "FAIL"
    return (
        f"pegs={report.pegs} | colours={report.colours} "
        f"| codes={report.actual_codes}/{report.expected_codes} "
        f"| max_turns={report.max_turns} | TTTS={report.ttts} | {status}"
    )


def summary_lines(report: CheckReport) -> List[str]:
    """The result block printed after the summary line."""
    if report.passed:
        return [f"No errors found. TTTS = {report.ttts}"]

    lines = [f"File problem: {issue}" for issue in report.file_issues]
    if report.missing:
        lines.append("Missing codes: " + " ".join(report.missing))
    if report.failed_records:
        where = f"; see {report.errors_path}" if report.errors_path else ""
        lines.append(f"{report.failed_records} record(s) failed checks{where}")
    return lines


def _marker_line(rec: Record) -> str:
    # two annotation columns + #, Solution, Turns, then a (guess, mark) pair per turn
    cells = ["", "", "", "", ""]
    for turn in rec.turns:
        bad_guess = not turn.guess_ok or not turn.guess_consistent
        cells.append("^" * max(len(turn.guess_text), 1) if bad_guess else "")

        if not turn.mark_valid or turn.mark_ok is False:
            expected = "?" if turn.expected_mark is None else mark_to_text(turn.expected_mark)
            cells.append("!" + expected)
        else:
            cells.append("")
    return ",".join(cells)


def annotate(trace: Trace) -> List[str]:
    """
    Full annotated copy of the trace, one entry per output line.

    Data lines come out in their original order, each prefixed with
    "OK,," or "ERR,<issue; issue; ...>,". A line with bad turns is followed by
    a marker line: '^' under each wrong guess, '!<expected mark>' under each
    wrong mark ('!?' when the expected mark can't be computed).
    """
    out: List[str] = []
    if trace.header is not None:
        out.append("Status,Issues," + trace.header.text)

    for rec in sorted(trace.records, key=lambda r: r.line):
        issues = rec.issues()
        if issues:
            out.append(f"ERR,{'; '.join(issues)},{rec.text}")
        else:
            out.append(f"OK,,{rec.text}")
        if any(t.has_problem for t in rec.turns):
            out.append(_marker_line(rec))
    return out
