"""Pytest configuration and shared fixtures for the stop times tests."""
import pytest

HEADER = [
    "trip_id",
    "arrival_time",
    "departure_time",
    "stop_id",
    "stop_sequence",
    "shape_dist_traveled",
]


def make_record(trip_id, arrival_time, departure_time, stop_sequence, shape_dist_traveled, stop_id=None):
    return {
        "trip_id": trip_id,
        "arrival_time": arrival_time,
        "departure_time": departure_time,
        "stop_id": stop_id or f"stop_{stop_sequence}",
        "stop_sequence": str(stop_sequence),
        "shape_dist_traveled": str(shape_dist_traveled),
    }


@pytest.fixture
def header():
    return list(HEADER)


@pytest.fixture
def single_gap_records():
    """A trip with three stops without times between two timing stops."""
    return [
        make_record("1", "06:58:00", "06:58:00", 1, 0),
        make_record("1", "", "", 2, 39),
        make_record("1", "", "", 3, 76),
        make_record("1", "", "", 4, 130),
        make_record("1", "07:02:00", "07:02:00", 5, 157),
    ]


@pytest.fixture
def timed_records():
    """Two trips where every stop already has its times."""
    return [
        make_record("1", "06:58:00", "06:58:00", 1, 0),
        make_record("1", "07:00:00", "07:00:30", 2, 80),
        make_record("1", "07:02:00", "07:02:00", 3, 157),
        make_record("2", "23:50:00", "23:50:00", 1, 0),
        make_record("2", "24:05:00", "24:05:00", 2, 500),
    ]


@pytest.fixture
def stop_times_content():
    """stop_times.txt content with Windows line endings and an opaque blank column."""
    lines = [
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence,pickup_type,shape_dist_traveled",
        "1,06:58:00,06:58:00,A,1,,0",
        "1,,,B,2,,39",
        "1,,,C,3,1,76",
        "1,,,D,4,,130",
        "1,07:02:00,07:02:00,E,5,,157",
        "2,23:58:00,23:58:00,A,1,,0",
        "2,,,B,2,,2",
        "2,00:02:00,00:02:00,C,3,,4",
    ]
    return "\r\n".join(lines) + "\r\n"


@pytest.fixture
def expected_content():
    lines = [
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence,pickup_type,shape_dist_traveled",
        "1,06:58:00,06:58:00,A,1,,0",
        "1,06:59:00,06:59:00,B,2,,39",
        "1,07:00:00,07:00:00,C,3,1,76",
        "1,07:01:00,07:01:00,D,4,,130",
        "1,07:02:00,07:02:00,E,5,,157",
        "2,23:58:00,23:58:00,A,1,,0",
        "2,00:00:00,00:00:00,B,2,,2",
        "2,00:02:00,00:02:00,C,3,,4",
    ]
    return lines


@pytest.fixture
def stop_times_file(tmp_path, stop_times_content):
    path = tmp_path / "stop_times.txt"
    path.write_bytes(stop_times_content.encode("utf-8"))
    return path
