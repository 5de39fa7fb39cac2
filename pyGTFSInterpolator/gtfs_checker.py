import os
import csv
import warnings
from typing import Any, Dict, List, Optional

REQUIRED_COLUMNS = ["trip_id", "arrival_time", "departure_time"]
DISTANCE_COLUMN = "shape_dist_traveled"
DELIMITERS = [",", ";", "\t", "|"]


# ------------------------------
# HEADER CHECK
# ------------------------------
def check_stop_times_header(header: List[str]) -> None:
    """
    Check that a stop_times header has the columns needed for interpolation.

    Raises:
        ValueError: If `trip_id`, `arrival_time` or `departure_time` is missing.
    """
    missing = [col for col in REQUIRED_COLUMNS if col not in header]
    if missing:
        raise ValueError(f"stop_times is missing mandatory columns: {missing}")

    if DISTANCE_COLUMN not in header:
        warnings.warn(
            f"stop_times has no '{DISTANCE_COLUMN}' column. Stop times without times can not be interpolated."
        )


# ------------------------------
# CSV FORMAT DETECTION
# ------------------------------
def detect_csv_format(sample_text: str, max_lines: int = 5) -> Dict[str, Any]:
    """
    Guess the delimiter and line terminator of a CSV sample.

    Falls back to the delimiter with the most consistent count per line when
    csv.Sniffer can not decide.
    """
    line_terminator = "\r\n" if "\r\n" in sample_text else "\n"

    lines = sample_text.strip().splitlines()[:max_lines]
    sample = "\n".join(lines)
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=DELIMITERS)
        delimiter = dialect.delimiter
    except csv.Error:
        delim_scores = {}
        for d in DELIMITERS:
            counts = [ln.count(d) for ln in lines if ln.strip()]
            if counts and max(counts) > 0:
                variance = max(counts) - min(counts)
                delim_scores[d] = (variance, -sum(counts) / len(counts))
        delimiter = min(delim_scores, key=delim_scores.get) if delim_scores else ","

    return {"delimiter": delimiter, "line_terminator": line_terminator}


def search_file(path, file) -> Optional[str]:
    """
    Recursively searches for the first file that matches the given filename
    in the directory and its subdirectories.

    Args:
        path (str): The root directory to start searching from.
        file (str): The filename to search for (case-sensitive).

    Returns:
        str | None: The full path of the first matching file, or None if not found.
    """
    for root, dirs, files in os.walk(path):
        dirs.sort()
        for f in sorted(files):
            if os.path.splitext(file)[0] == os.path.splitext(f)[0]:
                return os.path.join(root, f)

    return None
