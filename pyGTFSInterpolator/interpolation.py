# -*- coding: utf-8 -*-
"""
Stop Times Interpolation Engine

Fills missing `arrival_time` and `departure_time` values of a GTFS
`stop_times.txt` table, assuming vehicles travel at a constant speed between
two timing stops.

How it works:
-------------
Rows are processed one at a time, in file order:

1.  A row with both times is a **timing row**. If nothing is waiting to be
    interpolated it is emitted unchanged and remembered as the `anchor`.
2.  A row with a missing time (either one) is buffered in `pending`.
3.  The next timing row closes the span. The time between the anchor's
    departure and the closing row's arrival is shared out in proportion to
    `shape_dist_traveled`:

        anchor departure + (dist to this stop * total time) / total dist

    Each pending row gets the same arrival and departure time, rounded to the
    nearest minute (30 seconds and above round up). Pending rows are emitted
    in their original order followed by the closing row.

Spans crossing midnight are supported: a closing arrival earlier than the
anchor departure is taken to be on the next day. Interpolated times are
written as wall-clock HH:MM:SS (00-23 hours) even when the surrounding timing
rows use GTFS post-midnight notation such as 24:30:00; timing rows themselves
are never modified.

A span must start and end with timing rows of the same trip; anything else
raises `BoundaryError`. Rows that had only one of the two times are treated
like rows with none: the known value is discarded and both are recomputed.
"""

import logging
import math
from typing import Any, Dict, Iterable, Iterator, List, Optional

from . import utils
from . import gtfs_checker
from .exceptions import BoundaryError, InterpolationError, TimeParseError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

ZERO_DISTANCE_POLICIES = ["raise", "even"]


def times_missing(record: Record) -> bool:
    """True when arrival_time or departure_time is blank."""
    return utils.is_blank(record.get("arrival_time")) or utils.is_blank(
        record.get("departure_time")
    )


class InterpolationEngine:
    """
    Stateful, single-pass interpolator of stop_times records.

    A record is a mapping from column name to string value. Call `process`
    once per record in file order and `finalize` after the last one.

    Attributes:
        anchor (Optional[Record]): The last timing row seen, or None.
        pending (List[Record]): Rows waiting for the next timing row.
        zero_distance (str): What to do with a span whose timing rows share the
            same `shape_dist_traveled`: "raise" (InterpolationError) or "even"
            (space the pending rows evenly in time).
        n_spans (int): Number of spans interpolated.
        n_interpolated (int): Number of rows that got new times.
        n_partial_times (int): Interpolated rows that had one of the two times.
        n_unordered (int): Rows whose distance fell outside their span.
    """

    def __init__(
        self,
        header: Optional[List[str]] = None,
        zero_distance: str = "raise",
    ):
        if zero_distance not in ZERO_DISTANCE_POLICIES:
            raise ValueError(
                f"zero_distance must be one of {ZERO_DISTANCE_POLICIES}, got {zero_distance!r}"
            )
        if header is not None:
            gtfs_checker.check_stop_times_header(header)

        self.header = header
        self.zero_distance = zero_distance
        self.anchor: Optional[Record] = None
        self.pending: List[Record] = []

        self.n_spans: int = 0
        self.n_interpolated: int = 0
        self.n_partial_times: int = 0
        self.n_unordered: int = 0

    def process(self, record: Record) -> List[Record]:
        """
        Feed one record and return the records that are ready to be written.

        Raises:
            BoundaryError: The record closes a span that has no anchor in the
                same trip.
            TimeParseError: A timing row time can not be parsed.
            InterpolationError: The span can not be interpolated.
        """
        missing = times_missing(record)

        if not self.pending and not missing:
            self.anchor = record
            return [record]

        if missing:
            self.pending.append(record)
            return []

        emitted = self.__interpolate_span(record)
        self.pending = []

        emitted.append(record)
        self.anchor = record
        return emitted

    def finalize(self) -> None:
        """
        Check that every buffered row was interpolated.

        Raises:
            BoundaryError: The input ended with rows that have no closing
                timing row.
        """
        if self.pending:
            first = self.pending[0]
            raise BoundaryError(
                f"Trip ends with {len(self.pending)} stop times without a timing stop after them",
                trip_id=first.get("trip_id"),
                record=first,
            )

    def __interpolate_span(self, closing: Record) -> List[Record]:
        anchor = self.anchor
        trip_id = closing.get("trip_id")

        # A trip without timing data at its start or end
        if anchor is None or anchor.get("trip_id") != trip_id:
            raise BoundaryError(
                "Stop times without times are not preceded by a timing stop of the same trip",
                trip_id=trip_id,
                record=closing,
            )
        for row in self.pending:
            if row.get("trip_id") != trip_id:
                raise BoundaryError(
                    "Stop times without times are not enclosed by timing stops of their trip",
                    trip_id=row.get("trip_id"),
                    record=row,
                )

        try:
            total_time = utils.get_time_diff(
                anchor["departure_time"],
                closing["arrival_time"],
                field1="departure_time",
                field2="arrival_time",
            )
        except TimeParseError as e:
            raise TimeParseError(
                "Problem parsing the arrival or departure time from a timing row: "
                f"departure {anchor['departure_time']!r}, arrival {closing['arrival_time']!r}",
                value=e.value,
                trip_id=trip_id,
                field=e.field,
                record=anchor if e.field == "departure_time" else closing,
            ) from e

        anchor_dist = self.__distance(anchor)
        closing_dist = self.__distance(closing)
        total_dist = closing_dist - anchor_dist

        if total_dist == 0 and self.zero_distance == "raise":
            raise InterpolationError(
                f"Timing stops share the same {gtfs_checker.DISTANCE_COLUMN} ({closing_dist}), "
                f"can not interpolate {len(self.pending)} stop times",
                trip_id=trip_id,
                field=gtfs_checker.DISTANCE_COLUMN,
                record=closing,
            )
        if total_dist < 0:
            self.n_unordered += 1

        n = len(self.pending)
        emitted = []
        for i, missing_record in enumerate(self.pending):
            if total_dist == 0:
                time_to_this_stop = total_time * (i + 1) / (n + 1)
            else:
                stop_dist = self.__distance(missing_record)
                if not min(anchor_dist, closing_dist) <= stop_dist <= max(anchor_dist, closing_dist):
                    self.n_unordered += 1
                dist_to_this_stop = stop_dist - anchor_dist
                time_to_this_stop = (dist_to_this_stop * total_time) / total_dist

            try:
                new_time = utils.add_to_time(
                    anchor["departure_time"], time_to_this_stop, field="departure_time"
                )
            except TimeParseError as e:
                raise TimeParseError(
                    f"Problem parsing the departure time from a timing row: {anchor['departure_time']!r}",
                    value=e.value,
                    trip_id=trip_id,
                    field="departure_time",
                    record=anchor,
                ) from e
            except (OverflowError, ValueError) as e:
                raise InterpolationError(
                    f"Interpolated time is out of range: {anchor['departure_time']!r} + {time_to_this_stop} seconds",
                    trip_id=trip_id,
                    field=gtfs_checker.DISTANCE_COLUMN,
                    record=missing_record,
                ) from e

            if not (
                utils.is_blank(missing_record.get("arrival_time"))
                and utils.is_blank(missing_record.get("departure_time"))
            ):
                self.n_partial_times += 1

            fixed = dict(missing_record)
            fixed["arrival_time"] = new_time
            fixed["departure_time"] = new_time
            emitted.append(fixed)

        self.n_spans += 1
        self.n_interpolated += n
        logger.debug(
            f"Interpolated {n} stop times of trip {trip_id} between "
            f"{anchor['departure_time']} and {closing['arrival_time']}"
        )
        return emitted

    def __distance(self, record: Record) -> float:
        value = record.get(gtfs_checker.DISTANCE_COLUMN)
        if utils.is_blank(value):
            raise InterpolationError(
                f"Missing {gtfs_checker.DISTANCE_COLUMN}, needed to interpolate stop times",
                trip_id=record.get("trip_id"),
                field=gtfs_checker.DISTANCE_COLUMN,
                record=record,
            )
        try:
            distance = float(value)
        except ValueError as e:
            raise InterpolationError(
                f"Could not parse {gtfs_checker.DISTANCE_COLUMN}: {value!r}",
                trip_id=record.get("trip_id"),
                field=gtfs_checker.DISTANCE_COLUMN,
                record=record,
            ) from e
        if not math.isfinite(distance):
            raise InterpolationError(
                f"{gtfs_checker.DISTANCE_COLUMN} is not a finite number: {value!r}",
                trip_id=record.get("trip_id"),
                field=gtfs_checker.DISTANCE_COLUMN,
                record=record,
            )
        return distance


def interpolate_records(
    records: Iterable[Record],
    header: Optional[List[str]] = None,
    zero_distance: str = "raise",
) -> Iterator[Record]:
    """
    Interpolate a stream of stop_times records, yielding them in file order.

    Records are yielded as soon as they are resolved, so memory use is bounded
    by the longest run of rows without times.
    """
    engine = InterpolationEngine(header=header, zero_distance=zero_distance)
    for record in records:
        yield from engine.process(record)
    engine.finalize()
