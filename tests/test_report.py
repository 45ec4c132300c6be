import json
from pathlib import Path

from packages.checker import (annotate, build_report, pretty_summary, summary_lines, verify,
                              write_errors_file, write_manifest)
from packages.trace import load_trace, parse_trace

HEADER = "#,Solution,Turns,Guess 1,Mark 1,Guess 2,Mark 2,Guess 3,Mark 3"
GOOD = [HEADER, "0,AA,1,AA,bb", "1,AB,2,AA,b,AB,bb", "2,BA,3,AA,b,AB,ww,BA,bb", "3,BB,2,AA,-,BB,bb"]


def _report(lines):
    trace = parse_trace(lines)
    return trace, build_report(trace, verify(trace))


def test_report_metrics_for_good_trace():
    _, rep = _report(GOOD)
    assert rep.passed
    assert rep.ttts == 8 and rep.mtts == 3
    assert rep.distribution == [1, 2, 1]
    assert rep.average == 2.0
    assert rep.file_issues == [] and rep.notes == []
    assert pretty_summary(rep) == "pegs=2 | colours=2 | codes=4/4 | max_turns=3 | TTTS=8 | OK"
    assert summary_lines(rep) == ["No errors found. TTTS = 8"]


def test_annotate_good_trace():
    trace, _ = _report(GOOD)
    out = annotate(trace)
    assert out[0] == "Status,Issues," + HEADER
    assert out[1:] == ["OK,," + ln for ln in GOOD[1:]]


def test_annotate_wrong_mark_has_marker_line():
    lines = GOOD[:3] + ["2,BA,3,AA,b,AB,w,BA,bb"] + GOOD[4:]
    trace, rep = _report(lines)
    out = annotate(trace)
    assert len(out) == 6
    assert out[3] == "ERR,wrong mark,2,BA,3,AA,b,AB,w,BA,bb"
    assert out[4] == ",,,,,,,,!ww,,"
    assert out[5] == "OK,,3,BB,2,AA,-,BB,bb"
    assert not rep.passed and rep.failed_records == 1


def test_annotate_inconsistent_and_malformed():
    lines = [HEADER, "0,AA,1,AA,bb", "1,AB,2,AC,xx", "2,BA,3,AA,b,AB,ww,BA,bb", "3,BB,1,BB,bb"]
    trace, _ = _report(lines)
    out = annotate(trace)
    assert out[2].startswith("ERR,malformed guess; malformed mark; unresolved; wrong turn count,")
    assert out[3] == ",,,,,^^,!?"
    assert out[5] == "ERR,inconsistent guess,3,BB,1,BB,bb"
    assert out[6] == ",,,,,^^,"


def test_incomplete_trace_is_a_file_problem_only():
    trace, rep = _report(GOOD[:3] + GOOD[4:])
    assert rep.failed_records == 0
    assert rep.missing == ["BA"]
    assert rep.file_issues == ["expected 4 codes (2^2), found 3", "1 code(s) missing"]
    assert not rep.passed
    assert summary_lines(rep) == [
        "File problem: expected 4 codes (2^2), found 3",
        "File problem: 1 code(s) missing",
        "Missing codes: BA",
    ]
    assert "FAIL" in pretty_summary(rep)


def test_unresolved_records_do_not_count_towards_ttts():
    _, rep = _report(GOOD[:4] + ["3,BB,2,AA,-,AB,b"])
    assert rep.ttts == 6 and rep.mtts == 3
    assert rep.distribution == [1, 1, 1]
    assert rep.failed_records == 1


def test_filename_mismatch_and_notes(tmp_path: Path):
    p = tmp_path / "SolnMM(3,2)_greedy_7.csv"
    p.write_text("\n".join(GOOD[1:]) + "\n", encoding="utf-8")
    trace = load_trace(p)
    rep = build_report(trace, verify(trace))
    assert not rep.pegs_ok and rep.colours_ok
    assert rep.file_issues == ["filename says 3 pegs but codes have 2"]
    assert rep.notes == ["no header; assuming at most 8 turns", "algorithm: greedy"]


def test_incomplete_trace_checked_against_filename_colours(tmp_path: Path):
    p = tmp_path / "SolnMM(2,2)_full_1.csv"
    p.write_text("\n".join(GOOD[:3]) + "\n", encoding="utf-8")
    trace = load_trace(p)
    rep = build_report(trace, verify(trace))
    assert rep.missing == ["BA", "BB"]
    assert rep.failed_records == 0
    assert rep.file_issues == [
        "filename says 2 colours but 2 records imply 1",
        "expected 4 codes (2^2), found 2",
        "2 code(s) missing",
    ]


def test_unrecognised_filename_note(tmp_path: Path):
    p = tmp_path / "trace.csv"
    p.write_text("\n".join(GOOD) + "\n", encoding="utf-8")
    trace = load_trace(p)
    rep = build_report(trace, verify(trace))
    assert rep.passed
    assert rep.notes == ["filename does not encode (pegs,colours); dimensions taken from the data"]


def test_writers(tmp_path: Path):
    trace, rep = _report(GOOD)
    out = write_errors_file(annotate(trace), tmp_path / "sub" / "x_ERRORS.csv")
    assert Path(out).read_text(encoding="utf-8").endswith("OK,,3,BB,2,AA,-,BB,bb\n")

    mpath = write_manifest({"report": rep.as_dict()}, tmp_path / "m.json")
    data = json.loads(Path(mpath).read_text(encoding="utf-8"))
    assert data["report"]["ttts"] == 8
    assert data["report"]["distribution"] == [1, 2, 1]
