from __future__ import annotations

from pathlib import Path

import pytest

from movie_nexus.util.byte_range import FromToIncluding, Last, StartingAt
from movie_nexus.web.range_serving import (
    CHUNK_SIZE,
    FileServeError,
    is_satisfiable,
    prepare_file_response,
    resolve_bounds,
)

CONTENT = bytes(range(10))


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    path = tmp_path / "movie.mp4"
    path.write_bytes(CONTENT)
    return path


def _body(plan) -> bytes:
    return b"".join(plan.body) if plan.body is not None else b""


def test_no_range_serves_whole_file(media_file: Path) -> None:
    plan = prepare_file_response(media_file, None)
    assert plan.status_code == 200
    assert "Content-Range" not in plan.headers
    assert plan.headers["Accept-Ranges"] == "bytes"
    assert plan.headers["Content-Type"] == "video/mp4"
    assert plan.headers["Content-Length"] == "10"
    assert _body(plan) == CONTENT


@pytest.mark.parametrize(
    ("byte_range", "start", "end"),
    [
        (FromToIncluding(0, 0), 0, 0),
        (FromToIncluding(2, 6), 2, 6),
        (FromToIncluding(9, 9), 9, 9),
        (StartingAt(0), 0, 9),
        (StartingAt(7), 7, 9),
        (Last(5), 5, 9),
        (Last(10), 0, 9),
    ],
)
def test_satisfiable_ranges(media_file: Path, byte_range, start: int, end: int) -> None:
    plan = prepare_file_response(media_file, byte_range)
    assert plan.status_code == 206
    assert plan.headers["Content-Range"] == f"bytes {start}-{end}/10"
    assert plan.headers["Content-Length"] == str(end - start + 1)
    assert _body(plan) == CONTENT[start : end + 1]


def test_last_matches_starting_at(media_file: Path) -> None:
    for n in range(1, 11):
        last = prepare_file_response(media_file, Last(n))
        starting = prepare_file_response(media_file, StartingAt(10 - n))
        assert last.headers == starting.headers
        assert _body(last) == _body(starting)


@pytest.mark.parametrize(
    "byte_range",
    [
        StartingAt(10),
        StartingAt(11),
        Last(11),
        Last(0),
        FromToIncluding(10, 12),
        FromToIncluding(0, 10),
        FromToIncluding(5, 4),
    ],
)
def test_unsatisfiable_ranges(media_file: Path, byte_range) -> None:
    plan = prepare_file_response(media_file, byte_range)
    assert plan.status_code == 416
    assert plan.headers["Content-Range"] == "bytes */10"
    assert plan.headers["Accept-Ranges"] == "bytes"
    assert plan.body is None


def test_unsatisfiable_range_never_opens_file(media_file: Path, monkeypatch) -> None:
    def _fail(*_args, **_kwargs):
        raise AssertionError("file must not be opened")

    monkeypatch.setattr("builtins.open", _fail)
    plan = prepare_file_response(media_file, StartingAt(99))
    assert plan.status_code == 416


def test_missing_file_is_internal_fault(tmp_path: Path) -> None:
    with pytest.raises(FileServeError):
        prepare_file_response(tmp_path / "gone.mp4", None)


def test_content_type_omitted_when_unknown(tmp_path: Path) -> None:
    path = tmp_path / "blob.unknownext"
    path.write_bytes(b"abc")
    plan = prepare_file_response(path, None)
    assert "Content-Type" not in plan.headers
    assert _body(plan) == b"abc"


def test_text_track_content_type(tmp_path: Path) -> None:
    path = tmp_path / "movie.vtt"
    path.write_text("WEBVTT\n", encoding="utf-8")
    plan = prepare_file_response(path, None)
    assert plan.headers["Content-Type"] == "text/vtt"
    plan.body.close()


def test_large_window_is_streamed_in_chunks(tmp_path: Path) -> None:
    path = tmp_path / "big.mp4"
    data = bytes(i % 251 for i in range(3 * CHUNK_SIZE + 17))
    path.write_bytes(data)

    plan = prepare_file_response(path, FromToIncluding(5, 2 * CHUNK_SIZE + 9))
    chunks = list(plan.body)

    assert len(chunks) == 3
    assert b"".join(chunks) == data[5 : 2 * CHUNK_SIZE + 10]
    assert plan.body.closed


def test_same_range_twice_is_independent(media_file: Path) -> None:
    first = prepare_file_response(media_file, FromToIncluding(3, 8))
    second = prepare_file_response(media_file, FromToIncluding(3, 8))

    interleaved_first = []
    interleaved_second = []
    for chunk_a, chunk_b in zip(first.body, second.body):
        interleaved_first.append(chunk_a)
        interleaved_second.append(chunk_b)

    assert b"".join(interleaved_first) == CONTENT[3:9]
    assert b"".join(interleaved_second) == CONTENT[3:9]
    assert first.headers == second.headers


def test_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.mp4"
    path.write_bytes(b"")
    plan = prepare_file_response(path, None)
    assert plan.status_code == 200
    assert plan.headers["Content-Length"] == "0"
    assert _body(plan) == b""
    assert prepare_file_response(path, StartingAt(0)).status_code == 416
    assert prepare_file_response(path, Last(0)).status_code == 416


def test_bounds_helpers() -> None:
    assert is_satisfiable(FromToIncluding(0, 0), 1)
    assert not is_satisfiable(FromToIncluding(1, 0), 5)
    assert resolve_bounds(Last(3), 10) == (7, 9)
    assert resolve_bounds(StartingAt(4), 10) == (4, 9)
