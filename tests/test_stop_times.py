"""Tests for loading, interpolating and writing stop_times.txt files."""
import zipfile

import pytest

from pyGTFSInterpolator.models import StopTimes
from pyGTFSInterpolator.exceptions import BoundaryError, InterpolationError


def test_interpolates_file(stop_times_file, expected_content):
    stop_times = StopTimes(stop_times_file)

    assert stop_times.header == expected_content[0].split(",")
    assert stop_times.separator == ","
    assert stop_times.line_terminator == "\r\n"
    assert stop_times.fixed_times
    assert stop_times.n_spans == 2
    assert stop_times.n_interpolated == 4
    assert stop_times.df.height == 8
    assert stop_times.df["arrival_time"].to_list()[:5] == [
        "06:58:00", "06:59:00", "07:00:00", "07:01:00", "07:02:00",
    ]


def test_write_keeps_windows_line_endings(stop_times_file, expected_content, tmp_path):
    output = StopTimes(stop_times_file).write(tmp_path / "stop_times_interpolated.txt")
    assert output.read_bytes() == ("\r\n".join(expected_content) + "\r\n").encode("utf-8")


def test_write_unix_line_endings(stop_times_file, expected_content, tmp_path):
    output = StopTimes(stop_times_file).write(tmp_path / "stop_times_interpolated.txt", line_terminator="\n")
    assert output.read_bytes() == ("\n".join(expected_content) + "\n").encode("utf-8")


def test_passthrough_file(tmp_path):
    content = (
        "trip_id,arrival_time,departure_time,stop_id,stop_sequence,stop_headsign,shape_dist_traveled\n"
        "1,06:58:00,06:58:00,A,1,,0\n"
        "1,07:00:00,07:01:00,B,2,Centre,80\n"
        "2,23:50:00,23:50:00,A,1,,\n"
        "2,24:05:00,24:05:00,B,2,,\n"
    )
    path = tmp_path / "stop_times.txt"
    path.write_bytes(content.encode("utf-8"))

    stop_times = StopTimes(path)
    assert not stop_times.fixed_times
    assert stop_times.line_terminator == "\n"

    output = stop_times.write(tmp_path / "out.txt")
    assert output.read_bytes() == content.encode("utf-8")

    # Running again on the output changes nothing
    again = StopTimes(output).write(tmp_path / "out_again.txt")
    assert again.read_bytes() == content.encode("utf-8")


def test_semicolon_separator(tmp_path):
    content = (
        "trip_id;arrival_time;departure_time;stop_sequence;shape_dist_traveled\n"
        "1;06:00:00;06:00:00;1;0\n"
        "1;;;2;50\n"
        "1;06:10:00;06:10:00;3;100\n"
    )
    path = tmp_path / "stop_times.txt"
    path.write_bytes(content.encode("utf-8"))

    stop_times = StopTimes(path)
    assert stop_times.separator == ";"
    output = stop_times.write(tmp_path / "out.txt")
    assert output.read_bytes().decode("utf-8").splitlines()[2] == "1;06:05:00;06:05:00;2;50"


def test_reads_gtfs_folder(tmp_path, stop_times_content):
    gtfs_dir = tmp_path / "gtfs" / "feed"
    gtfs_dir.mkdir(parents=True)
    (gtfs_dir / "stop_times.txt").write_bytes(stop_times_content.encode("utf-8"))

    stop_times = StopTimes(tmp_path / "gtfs")
    assert stop_times.n_interpolated == 4


def test_reads_gtfs_zip(tmp_path, stop_times_content):
    zip_path = tmp_path / "gtfs.zip"
    with zipfile.ZipFile(zip_path, "w") as z:
        z.writestr("stops.txt", "stop_id,stop_name\nA,Main\n")
        z.writestr("stop_times.txt", stop_times_content)

    stop_times = StopTimes(zip_path)
    assert stop_times.n_interpolated == 4


def test_zip_without_stop_times(tmp_path):
    zip_path = tmp_path / "gtfs.zip"
    with zipfile.ZipFile(zip_path, "w") as z:
        z.writestr("stops.txt", "stop_id,stop_name\nA,Main\n")

    with pytest.raises(FileNotFoundError):
        StopTimes(zip_path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        StopTimes(tmp_path / "stop_times.txt")


def test_folder_without_stop_times(tmp_path):
    with pytest.raises(FileNotFoundError):
        StopTimes(tmp_path)


def test_empty_file(tmp_path):
    path = tmp_path / "stop_times.txt"
    path.write_bytes(b"")
    with pytest.raises(ValueError):
        StopTimes(path)


def test_missing_columns(tmp_path):
    path = tmp_path / "stop_times.txt"
    path.write_bytes(b"trip_id,stop_id\n1,A\n")
    with pytest.raises(ValueError):
        StopTimes(path)


def test_trailing_rows_without_timing_stop(tmp_path):
    path = tmp_path / "stop_times.txt"
    path.write_bytes(
        b"trip_id,arrival_time,departure_time,stop_sequence,shape_dist_traveled\n"
        b"1,06:00:00,06:00:00,1,0\n"
        b"1,,,2,50\n"
    )
    with pytest.raises(BoundaryError):
        StopTimes(path)


def test_zero_distance_policy(tmp_path):
    path = tmp_path / "stop_times.txt"
    path.write_bytes(
        b"trip_id,arrival_time,departure_time,stop_sequence,shape_dist_traveled\n"
        b"1,06:00:00,06:00:00,1,10\n"
        b"1,,,2,10\n"
        b"1,06:10:00,06:10:00,3,10\n"
    )
    with pytest.raises(InterpolationError):
        StopTimes(path)

    stop_times = StopTimes(path, zero_distance="even")
    assert stop_times.df["arrival_time"].to_list() == ["06:00:00", "06:05:00", "06:10:00"]


def test_partial_times_warn(tmp_path):
    path = tmp_path / "stop_times.txt"
    path.write_bytes(
        b"trip_id,arrival_time,departure_time,stop_sequence,shape_dist_traveled\n"
        b"1,06:00:00,06:00:00,1,0\n"
        b"1,,06:02:00,2,50\n"
        b"1,06:10:00,06:10:00,3,100\n"
    )
    with pytest.warns(UserWarning, match="only one of arrival_time or departure_time"):
        stop_times = StopTimes(path)
    assert stop_times.df["departure_time"].to_list()[1] == "06:05:00"
