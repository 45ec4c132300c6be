from .verifier import (MissingEntry, Verification, check_codes, check_counts, check_guesses,
                       check_marks, verify)
from .report import CheckReport, annotate, build_report, pretty_summary, summary_lines
from .io import write_errors_file, write_manifest

__all__ = [
    "MissingEntry", "Verification", "check_codes", "check_counts", "check_guesses",
    "check_marks", "verify",
    "CheckReport", "annotate", "build_report", "pretty_summary", "summary_lines",
    "write_errors_file", "write_manifest",
]
