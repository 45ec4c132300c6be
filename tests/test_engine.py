import pytest
from packages.engine import (CodeSpace, MalformedCode, MarkCache, ScoringRangeError,
                             StructuralError, all_black_mark, mark_for, mark_to_text,
                             parse_mark, precompute_mark_table, score)
from packages.engine.marks import MARK_TABLE, XX, mark_count

MM22 = CodeSpace(2, 2)
MM46 = CodeSpace(4, 6)


# --- code model ---

def test_enumeration_order_2x2():
    assert [MM22.code_to_text(c) for c in MM22.enumerate_codes()] == ["AA", "AB", "BA", "BB"]
    assert MM22.decode(1) == [1, 0]  # peg 0 is least significant


def test_enumeration_size_and_injective_decode():
    codes = MM46.enumerate_codes()
    assert len(codes) == 6 ** 4 == MM46.size
    assert len({tuple(MM46.decode(c)) for c in codes}) == 1296


def test_colour_frequency():
    code = MM46.text_to_code("ABBA")
    freq = MM46.colour_frequency(code)
    assert freq[0] == 2 and freq[1] == 2 and freq[2] == 0


def test_text_round_trip_all_codes():
    space = CodeSpace(3, 3)
    for c in space.enumerate_codes():
        assert space.text_to_code(space.code_to_text(c)) == c
        assert space.text_to_code(space.code_to_text(c, offered=False)) == c


def test_code_to_text_brackets_unoffered():
    assert MM46.code_to_text(MM46.text_to_code("FEDC"), offered=False) == "(FEDC)"


@pytest.mark.parametrize("text", ["(AB", "AB)", "ABA", "A", "AC", "ab", "", "()", "((AB))"])
def test_text_to_code_rejects(text):
    with pytest.raises(MalformedCode):
        MM22.text_to_code(text)


def test_code_to_text_out_of_range():
    with pytest.raises(ValueError):
        MM22.code_to_text(4)


@pytest.mark.parametrize("pegs,colours", [(0, 6), (11, 2), (4, 0), (4, 11)])
def test_code_space_bounds(pegs, colours):
    with pytest.raises(StructuralError):
        CodeSpace(pegs, colours)


def test_peg_and_frequency_matrices_match_decode():
    space = CodeSpace(3, 4)
    pegs = space.peg_matrix()
    freq = space.frequency_matrix()
    for c in space.enumerate_codes():
        assert list(pegs[c]) == space.decode(c)
        assert [int(n) for n in freq[c]] == [space.colour_frequency(c)[k] for k in range(4)]


# --- mark table ---

@pytest.mark.parametrize("pegs", range(1, 11))
def test_all_black_is_top_of_contiguous_range(pegs):
    marks = {
        MARK_TABLE[b][w]
        for b in range(pegs + 1)
        for w in range(pegs + 1 - b)
        if (b, w) != (pegs - 1, 1) and MARK_TABLE[b][w] != XX
    }
    assert marks == set(range(mark_count(pegs)))
    assert all_black_mark(pegs) == MARK_TABLE[pegs][0] == pegs * (pegs + 3) // 2 - 1


def test_mark_for_rejects_impossible():
    with pytest.raises(ScoringRangeError):
        mark_for(3, 1, 4)      # 3 black + 1 white can't happen with 4 pegs
    with pytest.raises(ScoringRangeError):
        mark_for(3, 0, 2)
    with pytest.raises(ScoringRangeError):
        mark_for(9, 1, 10)


@pytest.mark.parametrize("text,pegs,expected", [
    ("bb", 2, 4),
    ("BW", 4, 6),
    ("bBwW", 4, 12),
    ("-", 4, 0),
    ("", 4, 0),
    ("www", 3, 5),
    ("bw", 2, 6),        # parses; the marking check rejects it later
    ("wb", 4, None),
    ("b-", 4, None),
    ("--", 4, None),
    ("bbbbb", 4, None),
    ("x", 4, None),
])
def test_parse_mark(text, pegs, expected):
    assert parse_mark(text, pegs) == expected


def test_mark_to_text():
    assert mark_to_text(0) == "-"
    assert mark_to_text(4) == "bb"
    assert mark_to_text(12) == "bbww"
    with pytest.raises(ValueError):
        mark_to_text(99)


# --- scoring ---

def test_score_2x2_golden():
    AA, AB, BA, BB = range(4)
    assert score(MM22, AB, BA) == 3     # 0 black, 2 white
    assert score(MM22, AA, AB) == 1     # 1 black
    assert score(MM22, AA, BB) == 0
    assert score(MM22, BB, BB) == 4


@pytest.mark.parametrize("guess,solution,expected", [
    ("ABCD", "DCBA", "wwww"),
    ("AABB", "ABAB", "bbww"),
    ("AAAA", "ABCD", "b"),
    ("ABCD", "EFAB", "ww"),
    ("ABCD", "ABCE", "bbb"),
    ("FFFF", "ABCD", "-"),
])
def test_score_4x6_golden(guess, solution, expected):
    g, s = MM46.text_to_code(guess), MM46.text_to_code(solution)
    assert mark_to_text(score(MM46, g, s)) == expected


def test_score_symmetric_and_self_all_black():
    space = CodeSpace(3, 3)
    for a in space.enumerate_codes():
        assert score(space, a, a) == space.all_black
        for b in space.enumerate_codes():
            assert score(space, a, b) == score(space, b, a)


def test_cache_and_matrix_agree_with_score():
    space = CodeSpace(3, 4)
    cache = MarkCache(space)
    matrix = precompute_mark_table(space)
    for a in space.enumerate_codes():
        for b in space.enumerate_codes():
            expected = score(space, a, b)
            assert cache(a, b) == expected
            assert matrix(a, b) == expected
    # (a, b) and (b, a) share one entry
    assert len(cache) == space.size * (space.size + 1) // 2
    assert cache.hits > 0


def test_matrix_row_is_lower_triangle():
    matrix = precompute_mark_table(MM22)
    assert list(matrix.row(2)) == [score(MM22, 2, j) for j in range(3)]


def test_precompute_refuses_huge_tables():
    with pytest.raises(StructuralError):
        precompute_mark_table(CodeSpace(5, 7))  # 16807 codes
