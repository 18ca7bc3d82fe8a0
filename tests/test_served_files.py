from __future__ import annotations

from pathlib import Path

from movie_nexus.catalogue.scanner import scan_directory
from movie_nexus.catalogue.served_files import ServedFileIndex, extract_served_files
from movie_nexus.models.catalogue import RelativizedPath
from tests.helpers import write_video


def test_served_set_holds_videos_and_text_tracks(tmp_path: Path) -> None:
    write_video(tmp_path / "Shows", "ep1", with_track=True)
    write_video(tmp_path, "movie")
    (tmp_path / "Empty").mkdir()

    catalogue = scan_directory(tmp_path, tmp_path)
    served = extract_served_files(catalogue)

    assert {entry.public_path() for entry in served} == {
        "Shows/ep1.mp4",
        "Shows/ep1.vtt",
        "movie.mp4",
    }


def test_index_lookup_by_public_path(tmp_path: Path) -> None:
    write_video(tmp_path / "Shows", "ep1", with_track=True, language="de")
    index = ServedFileIndex.from_catalogue(scan_directory(tmp_path, tmp_path))

    assert len(index) == 2
    assert "Shows/ep1.vtt" in index
    entry = index.lookup("Shows/ep1.mp4")
    assert entry == RelativizedPath.new(tmp_path, tmp_path / "Shows" / "ep1.mp4")
    assert index.lookup("Shows") is None
    assert index.lookup("Shows/ep1.toml") is None
    assert index.lookup("../Shows/ep1.mp4") is None
    assert set(index) == extract_served_files(scan_directory(tmp_path, tmp_path))
