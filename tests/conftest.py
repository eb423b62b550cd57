"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src and tests directories to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

import helpers  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the user's ~/.tagsmith."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("TAGSMITH_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture
def flac_path(tmp_path):
    """FLAC file with TITLE=Foo, ARTIST=Bar and a LYRICS comment."""
    path = tmp_path / "song.flac"
    path.write_bytes(helpers.simple_flac(["TITLE=Foo", "ARTIST=Bar", "LYRICS=la la la"]))
    return path


@pytest.fixture
def id3v23_path(tmp_path):
    """MP3 with an ID3v2.3 tag holding title, year and a TPOS frame."""
    path = tmp_path / "song.mp3"
    frames = [
        helpers.id3_frame(b"TIT2", helpers.id3_text("Old Title")),
        helpers.id3_frame(b"TPE1", helpers.id3_text("Artist")),
        helpers.id3_frame(b"TYER", helpers.id3_text("2024")),
        helpers.id3_frame(b"TPOS", helpers.id3_text("1/2")),
    ]
    path.write_bytes(helpers.id3v2_file(frames, major=3, padding=32))
    return path


@pytest.fixture
def id3v24_path(tmp_path):
    """MP3 with an ID3v2.4 tag."""
    path = tmp_path / "song24.mp3"
    frames = [
        helpers.id3_frame(b"TIT2", helpers.id3_text("Title", 3), major=4),
        helpers.id3_frame(b"TDRC", helpers.id3_text("2021-06-01", 3), major=4),
    ]
    path.write_bytes(helpers.id3v2_file(frames, major=4, padding=16))
    return path


@pytest.fixture
def id3v1_path(tmp_path):
    """MP3 with only an ID3v1.1 trailer."""
    path = tmp_path / "old.mp3"
    block = helpers.id3v1_block(
        title=b"Title", artist=b"Artist", album=b"Album", year=b"1999", comment=b"Hi", track=5
    )
    path.write_bytes(helpers.MP3_AUDIO + block)
    return path


@pytest.fixture
def ogg_path(tmp_path):
    path = tmp_path / "song.ogg"
    path.write_bytes(helpers.ogg_vorbis_file(["TITLE=Ogg Title", "ARTIST=Ogg Artist"]))
    return path


@pytest.fixture
def opus_path(tmp_path):
    path = tmp_path / "song.opus"
    path.write_bytes(helpers.opus_file(["TITLE=Opus Title"]))
    return path


@pytest.fixture
def mp4_path(tmp_path):
    path = tmp_path / "song.m4a"
    items = [
        helpers.mp4_item(b"\xa9nam", "MP4 Title".encode("utf-8")),
        helpers.mp4_item(b"\xa9ART", "MP4 Artist".encode("utf-8")),
    ]
    path.write_bytes(helpers.mp4_file(items))
    return path


@pytest.fixture
def ape_path(tmp_path):
    path = tmp_path / "song.ape"
    path.write_bytes(helpers.ape_file([helpers.ape_item("Title", b"Hello")]))
    return path
