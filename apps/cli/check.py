# apps/cli/check.py
"""
CLI entry point for checking a Mastermind solution trace.

This script:
  1) Parses the trace (pegs come from the codes; colours from --colours, else
     a SolnMM(p,c)_... filename, else the number of records).
  2) Runs the four consistency checks: codes, turn counts, guesses, marks.
  3) Prints a one-line summary, then either "No errors found. TTTS = N" or
     the problems found, and writes an annotated <name>_ERRORS copy of the
     trace when any line fails.

Exit status: 0 when the checks ran (whatever they found), 1 when the trace
couldn't be checked at all, 2 for usage errors.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from packages.checker import (annotate, build_report, pretty_summary, summary_lines, verify,
                              write_errors_file, write_manifest)
from packages.checker.io import timestamp_id
from packages.engine import MarkCache, StructuralError, precompute_mark_table
from packages.trace import errors_path, load_trace

EPILOG = """\
The trace is the solution file written by the solver, e.g.
  SolnMM(4,6)_full_282970100085955.csv

If the solution is not satisfactory, the missing codes are listed and an
annotated copy of the file (<name>_ERRORS.csv) shows every line that failed
and why.

This program makes no claim about whether a solution is optimal.
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="mmcheck",
        description="Check the validity of a Mastermind solution trace",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("trace", nargs="?", help="solution file to check")
    ap.add_argument("--colours", type=int,
                    help="number of colours (default: from the SolnMM(p,c) filename, "
                         "else inferred from the number of records)")
    ap.add_argument("--precompute", action="store_true",
                    help="build the full mark table up front instead of scoring on demand")
    ap.add_argument("--errors-out",
                    help="where to write the annotated copy (default: <trace>_ERRORS.<ext>)")
    ap.add_argument("--manifest", help="also write the report as JSON to this path")
    ap.add_argument(
        "--progress",
        choices=["auto", "bar", "off"],
        default="auto",
        help="Show progress bars (auto=bar if stderr is a terminal)."
    )
    return ap


def _progress_enabled(mode: str) -> bool:
    if mode == "auto":
        return sys.stderr.isatty()
    return mode == "bar"


def run(args: argparse.Namespace) -> int:
    """Check one trace; StructuralError propagates to main()."""
    progress = _progress_enabled(args.progress)

    # 1) Parse
    trace = load_trace(args.trace, colours=args.colours)

    # 2) Verify (on-demand scoring unless asked for the full table)
    if args.precompute:
        marker = precompute_mark_table(trace.space, progress=progress)
    else:
        marker = MarkCache(trace.space)
    result = verify(trace, marker=marker, progress=progress)

    # 3) Report
    rep = build_report(trace, result)
    if result.failed:
        out = Path(args.errors_out) if args.errors_out else errors_path(args.trace)
        try:
            rep.errors_path = write_errors_file(annotate(trace), out)
        except OSError as e:
            raise StructuralError(f"cannot write {out}: {e}") from e

    for note in rep.notes:
        sys.stderr.write(f"note: {note}\n")
    print(pretty_summary(rep))
    for line in summary_lines(rep):
        print(line)

    if args.manifest:
        write_manifest({"run_id": timestamp_id(), "report": rep.as_dict()}, args.manifest)
        print(f"Wrote: {args.manifest}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if not args.trace:
        ap.print_help()
        return 2

    try:
        return run(args)
    except StructuralError as e:
        sys.stderr.write(f"error: {e}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
