from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

ERRORS_SUFFIX = "_ERRORS"

# e.g. SolnMM(4,6)_full_282970100085955.csv
SOLUTION_NAME_RE = re.compile(r"^SolnMM\((\d{1,2}),(\d{1,2})\)_([^_]*)_")


@dataclass(frozen=True)
class FileDims:
    """Puzzle dimensions as declared by a solution file's name."""
    pegs: int
    colours: int
    algorithm: str


def read_lines(p: Path | str) -> List[str]:
    """
    Raw lines of a trace file, header included, blank lines kept.

    Traces written on Windows end in CR/LF; splitlines() drops both, so a
    record's last mark ("bb\\r") never picks up a stray carriage return.
    Raises FileNotFoundError if the path doesn't exist.
    """
    p = Path(p)
    if not p.exists():
        raise FileNotFoundError(p)
    return p.read_text(encoding="utf-8").splitlines()


def write_lines(lines: Iterable[str], p: Path | str) -> str:
    """
    Write an annotated trace (or any line list) as UTF-8 with LF endings,
    creating the directory if needed. Returns the path written.
    """
    p = Path(p)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(p)


def parse_solution_filename(name: Path | str) -> Optional[FileDims]:
    """
    Dimensions encoded in a solver output name, or None if it doesn't follow
    the SolnMM(<pegs>,<colours>)_<algorithm>_<stamp> convention (renamed files
    are fine; the name is only ever used as a cross-check).
    """
    m = SOLUTION_NAME_RE.match(Path(name).name)
    if not m:
        return None
    return FileDims(pegs=int(m.group(1)), colours=int(m.group(2)), algorithm=m.group(3))


def errors_path(p: Path | str) -> Path:
    """Sibling path for the annotated copy: dir/stem_ERRORS.ext"""
    p = Path(p)
    return p.with_name(f"{p.stem}{ERRORS_SUFFIX}{p.suffix}")
