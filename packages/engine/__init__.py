from .codes import CodeSpace
from .errors import MalformedCode, ScoringRangeError, StructuralError
from .marks import all_black_mark, mark_for, mark_to_text, parse_mark
from .scoring import MarkCache, MarkMatrix, precompute_mark_table, score

__all__ = [
    "CodeSpace", "MalformedCode", "ScoringRangeError", "StructuralError",
    "all_black_mark", "mark_for", "mark_to_text", "parse_mark",
    "MarkCache", "MarkMatrix", "precompute_mark_table", "score",
]
