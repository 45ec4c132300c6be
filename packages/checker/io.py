"""
Output files for a check run.

Responsibilities:
- write_errors_file: the annotated copy of the trace (OK,, / ERR,<issues>, prefixes).
- write_manifest:    dump the report as JSON for scripts and dashboards.
- timestamp_id:      stable UTC run ID string.

Notes:
- The annotated copy keeps the trace's own comma layout, so it still opens as
  a spreadsheet: two extra leading columns, then the original fields.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable
import json
import datetime as dt

from packages.trace import write_lines


def write_errors_file(lines: Iterable[str], path: Path | str) -> str:
    """Write the annotated trace; returns the path written."""
    return write_lines(lines, path)


def write_manifest(manifest: Dict, path: Path | str) -> str:
    """
    Write a JSON manifest with the check results.

    Typical keys:
      - run_id
      - report: CheckReport.as_dict() (dimensions, flags, TTTS, missing codes)
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)
    return str(p)


def timestamp_id() -> str:
    """
    Return a compact UTC timestamp suitable for filenames, e.g. 20250820T024121Z.
    """
    return dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")
