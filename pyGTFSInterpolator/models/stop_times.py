# -*- coding: utf-8 -*-
import logging
import os
import warnings
import zipfile
from pathlib import Path
from typing import List, Optional, Union

import polars as pl

from .. import utils, gtfs_checker
from ..interpolation import InterpolationEngine

"""
GTFS StopTimes Interpolation Module

This module provides the `StopTimes` class, which loads a GTFS `stop_times.txt`
table, fills in the missing arrival and departure times and writes the result
back out.

What is performed by this module:
---------------------------------
1.  **Data Loading**: `stop_times.txt` is read from a file, from a GTFS folder
    (searched recursively) or from a zipped GTFS feed. Every column is kept as
    a string so untouched values are written back exactly as read. The
    delimiter and line ending are detected from the file.

2.  **Interpolation**: Rows are fed in file order to an `InterpolationEngine`,
    which fills missing times linearly on `shape_dist_traveled` between the
    timing stops of each trip and rounds them to the nearest minute.

3.  **Writing**: The result keeps the input columns in the input order. The
    line terminator is configurable and defaults to the one of the input file.

Any problem (unparseable times, trips without timing stops at their start or
end, spans with no distance) raises an error from the constructor, so a
result is only ever available for a fully interpolated table.
"""

logger = logging.getLogger(__name__)

STOP_TIMES_FILE = "stop_times.txt"


class StopTimes:
    """
    Loads, interpolates and writes GTFS stop_times.txt data.

    Attributes:
        path (Path): The file, folder or zip the data was read from.
        separator (str): Column delimiter of the input.
        line_terminator (str): Line ending of the input, used when writing.
        header (List[str]): Column names in file order.
        df (pl.DataFrame): The interpolated stop times, all columns as strings.
        fixed_times (bool): True if any stop time was interpolated.
        n_spans (int): Number of interpolated spans.
        n_interpolated (int): Number of interpolated rows.
    """

    def __init__(
        self,
        path: Union[str, Path],
        separator: Optional[str] = None,
        zero_distance: str = "raise",
    ):
        """
        Reads the stop times and runs the interpolation.

        Args:
            path (Union[str, Path]): stop_times.txt file, GTFS folder or GTFS zip.
            separator (Optional[str]): Column delimiter. Detected when None.
            zero_distance (str): Policy for spans whose timing stops share the
                same distance, "raise" or "even".

        Raises:
            FileNotFoundError: If no stop_times.txt can be found.
            ValueError: If the file is empty or lacks mandatory columns.
            StopTimesError: If the stop times can not be interpolated.
        """
        self.path = Path(path)
        content: bytes = self.__read_bytes(self.path)

        csv_format = gtfs_checker.detect_csv_format(
            content[:4096].decode("utf-8", errors="ignore")
        )
        self.separator: str = separator or csv_format["delimiter"]
        self.line_terminator: str = csv_format["line_terminator"]

        stop_times = utils.read_csv(content, separator=self.separator)
        if not stop_times.columns:
            raise ValueError(f"Failed to get the header row of {self.path}")

        self.header: List[str] = stop_times.columns

        engine = InterpolationEngine(header=self.header, zero_distance=zero_distance)
        rows = []
        for row in stop_times.iter_rows(named=True):
            rows.extend(engine.process(row))
        engine.finalize()

        self.df: pl.DataFrame = pl.from_dicts(
            rows, schema={col: pl.Utf8 for col in self.header}
        )
        self.n_spans: int = engine.n_spans
        self.n_interpolated: int = engine.n_interpolated
        self.fixed_times: bool = engine.n_interpolated > 0

        if engine.n_partial_times:
            warnings.warn(
                f"{engine.n_partial_times} stop times had only one of arrival_time or "
                "departure_time; both have been interpolated"
            )
        if engine.n_unordered:
            warnings.warn(
                f"{engine.n_unordered} stop times have a shape_dist_traveled outside the "
                "distance range of their timing stops"
            )

        logger.info(
            f"Interpolated {self.n_interpolated} of {self.df.height} stop times "
            f"in {self.n_spans} spans from {self.path}"
        )

    def __read_bytes(self, path: Path) -> bytes:
        """
        Returns the raw content of stop_times.txt from a file, folder or zip.
        """
        if path.is_dir():
            found = gtfs_checker.search_file(path, STOP_TIMES_FILE)
            if found is None:
                raise FileNotFoundError(f"No {STOP_TIMES_FILE} file found in {path}")
            path = Path(found)

        if not path.is_file():
            raise FileNotFoundError(f"{path} does not exist")

        if zipfile.is_zipfile(path):
            with zipfile.ZipFile(path, "r") as z:
                members = [
                    m for m in sorted(z.namelist())
                    if os.path.basename(m) == STOP_TIMES_FILE
                ]
                if not members:
                    raise FileNotFoundError(f"No {STOP_TIMES_FILE} file found in {path}")
                with z.open(members[0]) as f:
                    return f.read()

        with open(path, "rb") as f:
            return f.read()

    def write(
        self,
        path: Union[str, Path],
        line_terminator: Optional[str] = None,
    ) -> Path:
        """
        Writes the interpolated stop times.

        Args:
            path (Union[str, Path]): Output file.
            line_terminator (Optional[str]): "\\r\\n" or "\\n". Defaults to the
                line ending of the input file.

        Returns:
            Path: The written file.
        """
        return utils.write_csv(
            self.df,
            path,
            header=self.header,
            separator=self.separator,
            line_terminator=line_terminator or self.line_terminator,
        )

