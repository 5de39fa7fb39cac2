import os
import sys
import argparse
import logging
from typing import List, Optional

from pyGTFSInterpolator.models import StopTimes
from pyGTFSInterpolator.interpolation import ZERO_DISTANCE_POLICIES
from pyGTFSInterpolator.exceptions import StopTimesError
import pyGTFSInterpolator.utils as utils

logger = logging.getLogger("pyGTFSInterpolator")

LINE_TERMINATORS = {"crlf": utils.CRLF, "lf": utils.LF, "auto": None}
OUTPUT_FILE = "stop_times_interpolated.txt"
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interpolate missing stop times of a GTFS stop_times.txt using shape_dist_traveled."
    )

    parser.add_argument('--input', default='stop_times.txt', help='stop_times.txt file, GTFS folder or GTFS zip')

    # Optional arguments with defaults
    parser.add_argument('--output', default=None, help=f'Output file (default: {OUTPUT_FILE} next to the input)')
    parser.add_argument('--separator', default=None, help='Column delimiter (default: detected from the input)')
    parser.add_argument('--line_terminator', choices=list(LINE_TERMINATORS), default='auto',
                        help='Line ending of the output, auto keeps the one of the input')
    parser.add_argument('--zero_distance', choices=ZERO_DISTANCE_POLICIES, default='raise',
                        help='What to do when two timing stops share the same shape_dist_traveled: '
                             'raise an error or space the stops in between evenly in time')
    parser.add_argument('--log_level', choices=LOG_LEVELS, default='INFO', type=str.upper, help='Logging level')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=args.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logging.captureWarnings(True)

    input_path = args.input
    if args.output:
        output_path = args.output
    elif os.path.isdir(input_path):
        output_path = os.path.join(input_path, OUTPUT_FILE)
    else:
        output_path = os.path.join(os.path.dirname(input_path), OUTPUT_FILE)

    try:
        stop_times = StopTimes(input_path, separator=args.separator, zero_distance=args.zero_distance)
    except (StopTimesError, OSError, ValueError) as e:
        logger.error(f"Could not interpolate {input_path}: {e}")
        return 1

    try:
        stop_times.write(output_path, line_terminator=LINE_TERMINATORS[args.line_terminator])
    except OSError as e:
        logger.error(f"Could not write {output_path}: {e}")
        return 1

    logger.info(f"Wrote {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
