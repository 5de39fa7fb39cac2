import os
import re
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import polars as pl

from .exceptions import TimeParseError

logger = logging.getLogger(__name__)

# Constants
# Arbitrary calendar date so that time arithmetic can roll past midnight
REFERENCE_DATE = datetime(2000, 1, 1)
SECS_PER_DAY: int = 86400
# GTFS allows post-midnight times such as 25:30:00 for trips of the previous service day
MAX_HOUR: int = 47
ROUND_SECONDS: int = 60
TIME_FORMAT = "%H:%M:%S"
CRLF = "\r\n"
LF = "\n"

TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2}):(\d{2})\s*$")


# -------------------------
# Date and Time Utilities
# -------------------------
def is_blank(value: Any) -> bool:
    """True for None, empty or whitespace only values."""
    return value is None or str(value).strip() == ""


def parse_time(value: Any, field: Optional[str] = None) -> datetime:
    """
    Parse a HH:MM:SS string onto `REFERENCE_DATE`.

    Hours from 24 up to `MAX_HOUR` land on the following day, which keeps
    GTFS post-midnight notation comparable with ordinary times.

    Raises:
        TimeParseError: If the value is not a valid HH:MM:SS time.
    """
    match = TIME_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise TimeParseError(f"Could not parse time: {value!r}", value=value, field=field)

    h, m, s = map(int, match.groups())
    if m > 59 or s > 59:
        raise TimeParseError(f"Invalid time value: {value!r}", value=value, field=field)
    if h > MAX_HOUR:
        raise TimeParseError(
            f"Invalid hour value: {value!r} is over {MAX_HOUR} hours", value=value, field=field
        )

    return REFERENCE_DATE + timedelta(hours=h, minutes=m, seconds=s)


def round_to_minute(dt: datetime) -> datetime:
    """
    Round to the nearest whole minute.

    0-29.999 seconds are rounded down and 30-59 seconds are rounded up.
    """
    secs_to_round = dt.second + dt.microsecond / 1e6
    rounded = dt.replace(second=0, microsecond=0)
    if secs_to_round >= ROUND_SECONDS / 2:
        rounded += timedelta(seconds=ROUND_SECONDS)
    return rounded


def add_to_time(time: str, secs: float, field: Optional[str] = None) -> str:
    """
    Add a (possibly fractional, possibly negative) number of seconds to a
    HH:MM:SS time and round the result to the nearest minute.

    The result is a wall-clock time, hours wrap modulo 24:
    add_to_time("23:58:00", 600) == "00:08:00".

    Raises:
        TimeParseError: If `time` can not be parsed.
        OverflowError: If the result falls outside the supported date range.
    """
    new_time = parse_time(time, field=field) + timedelta(seconds=secs)
    return round_to_minute(new_time).strftime(TIME_FORMAT)


def get_time_diff(
    t1: str, t2: str, field1: Optional[str] = None, field2: Optional[str] = None
) -> int:
    """
    Number of seconds from `t1` to `t2`.

    If `t2` is earlier than `t1` by less than a day, `t2` is assumed to be on
    the following day (a span crossing midnight). Larger gaps are not
    corrected and give a negative result.

    Raises:
        TimeParseError: If either time can not be parsed.
    """
    time1 = parse_time(t1, field=field1)
    time2 = parse_time(t2, field=field2)

    if time1 > time2 and (time1 - time2).total_seconds() < SECS_PER_DAY:
        time2 += timedelta(days=1)

    return int((time2 - time1).total_seconds())


# -------------------------
# CSV / GTFS Utilities
# -------------------------
def read_csv(source: Union[str, Path, bytes], separator: str = ",") -> pl.DataFrame:
    """
    Read a GTFS table keeping every value as a string.

    Blank fields are read as empty strings so that rows round trip unchanged.
    Column names are stripped of a leading BOM and surrounding whitespace.
    """
    df = pl.read_csv(
        source,
        separator=separator,
        infer_schema=False,
        raise_if_empty=False,
        truncate_ragged_lines=True,
        empty_string_is_null=False,
    )

    rename_map: Dict[str, str] = {
        col: col.lstrip("\ufeff").strip() for col in df.columns
    }
    df = df.rename({k: v for k, v in rename_map.items() if k != v})
    return df


def write_csv(
    rows: Union[pl.DataFrame, List[Dict[str, Any]]],
    path: Union[str, Path],
    header: Optional[List[str]] = None,
    separator: str = ",",
    line_terminator: str = CRLF,
) -> Path:
    """
    Write rows in header order with the given separator and line terminator.

    `rows` is either a DataFrame or a list of records; for records the
    `header` decides the column order.
    """
    if isinstance(rows, pl.DataFrame):
        df = rows if header is None else rows.select(header)
    else:
        if header is None:
            raise ValueError("A header is needed to write a list of records")
        df = pl.from_dicts(rows, schema={col: pl.Utf8 for col in header})

    # Blank values are written as nulls, polars quotes empty strings
    df = df.with_columns(
        [
            pl.when(pl.col(col) == "").then(None).otherwise(pl.col(col)).alias(col)
            for col in df.columns
        ]
    )

    path = Path(path)
    if path.parent and not path.parent.exists():
        os.makedirs(path.parent, exist_ok=True)

    df.write_csv(path, separator=separator, line_terminator=line_terminator)
    logger.debug(f"Wrote {df.height} rows to {path}")
    return path
