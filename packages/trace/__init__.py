from .parser import Header, Record, Trace, Turn, load_trace, parse_record, parse_trace
from .io import errors_path, parse_solution_filename, read_lines, write_lines

__all__ = [
    "Header", "Record", "Trace", "Turn", "load_trace", "parse_record", "parse_trace",
    "errors_path", "parse_solution_filename", "read_lines", "write_lines",
]
