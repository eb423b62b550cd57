"""End-to-end tests of the file-level API."""

import json
import logging
import os

import pytest

import helpers
from tagsmith import (
    AudioFile,
    CoverArt,
    Metadata,
    read_cover,
    read_metadata,
    remove_cover,
    write_cover,
    write_metadata,
)
from tagsmith.codecs import Id3v2Header, Id3v2Tag
from tagsmith.config import Config
from tagsmith.errors import AudioIOError, TagParseError, UnsupportedFormatError
from tagsmith.tag import FormatKind, get_codec


class TestScenarios:
    """Literal end-to-end scenarios across formats."""

    def test_flac_title_artist(self, tmp_path):
        """FLAC VORBIS_COMMENT TITLE=Foo, ARTIST=Bar."""
        path = tmp_path / "a.flac"
        path.write_bytes(helpers.simple_flac(["TITLE=Foo", "ARTIST=Bar"]))
        assert read_metadata(path).to_dict() == {"title": "Foo", "artist": "Bar"}

    def test_id3v23_year(self, tmp_path):
        """TYER with encoding byte 0 reads as the year."""
        path = tmp_path / "a.mp3"
        path.write_bytes(helpers.id3v2_file([helpers.id3_frame(b"TYER", b"\x00" + b"2024")]))
        assert read_metadata(path).year == "2024"

    def test_bare_id3v1_track(self, tmp_path):
        """A file that is only a 128-byte ID3v1.1 block."""
        path = tmp_path / "a.mp3"
        path.write_bytes(helpers.id3v1_block(title=b"Song Title", track=5))
        metadata = read_metadata(path)
        assert metadata.track == "5"
        assert metadata.title == "Song Title"

    def test_ape_title(self, ape_path):
        """APE footer with a single Title item."""
        assert read_metadata(ape_path).title == "Hello"

    def test_flac_remove_lyrics(self, flac_path):
        """{"lyrics": null} removes the LYRICS comment."""
        assert write_metadata(flac_path, Metadata.from_json('{"lyrics": null}'))
        metadata = read_metadata(flac_path)
        assert metadata.lyrics is None
        assert metadata.title == "Foo"
        assert b"LYRICS" not in flac_path.read_bytes()


class TestRoundTrip:
    """Writing then reading gives back the written fields."""

    UPDATE = Metadata(
        title="Title ✓",
        artist="Artist",
        album="Album",
        year="2020",
        track="4",
        genre="Jazz",
        comment="Comment",
        lyrics="La la",
        album_artist="Various",
        composer="Someone",
    )

    @pytest.mark.parametrize(
        "fixture", ["flac_path", "id3v23_path", "id3v24_path", "ogg_path", "opus_path"]
    )
    def test_all_text_fields(self, fixture, request):
        """All text fields survive a write in every fully writable format."""
        path = request.getfixturevalue(fixture)
        write_metadata(path, self.UPDATE)
        assert read_metadata(path).restricted_to(self.UPDATE.text_updates()) == self.UPDATE

    def test_id3v1_subset(self, id3v1_path):
        """ID3v1 stores its own subset of fields."""
        codec = get_codec(FormatKind.ID3V1)
        update = Metadata(title="Short", artist="Band", album="LP", year="2001", comment="ok", track="9")
        write_metadata(id3v1_path, update)
        assert read_metadata(id3v1_path).restricted_to(codec.fields) == update

    def test_unstorable_fields_warn(self, id3v1_path, ogg_path, caplog):
        """Fields a format has no place for are skipped with a warning."""
        cover = CoverArt(data=helpers.png_bytes())
        with caplog.at_level(logging.WARNING):
            assert write_metadata(id3v1_path, Metadata(title="T", genre="Rock", cover=cover, composer=None))
        assert "id3v1 tags cannot store cover, genre" in caplog.text
        assert "composer" not in caplog.text
        assert read_metadata(id3v1_path).title == "T"

        caplog.clear()
        with caplog.at_level(logging.WARNING):
            write_metadata(ogg_path, Metadata(genre="Rock", cover=cover))
        assert "ogg tags cannot store cover" in caplog.text
        assert read_metadata(ogg_path).genre == "Rock"

        caplog.clear()
        with caplog.at_level(logging.WARNING):
            write_metadata(ogg_path, Metadata(genre="Jazz"))
        assert "cannot store" not in caplog.text

    @pytest.mark.parametrize("fixture", ["flac_path", "id3v23_path", "ogg_path", "opus_path", "id3v1_path"])
    def test_idempotent(self, fixture, request):
        """Writing the same update twice leaves the file unchanged the second time."""
        path = request.getfixturevalue(fixture)
        update = Metadata(title="Same", artist="Same")
        assert write_metadata(path, update)
        first = path.read_bytes()
        assert not write_metadata(path, update)
        assert path.read_bytes() == first

    def test_untouched_fields(self, id3v23_path):
        """Fields not in the update are kept."""
        write_metadata(id3v23_path, Metadata(title="New Title"))
        metadata = read_metadata(id3v23_path)
        assert metadata.title == "New Title"
        assert metadata.artist == "Artist"
        assert metadata.year == "2024"

    def test_cover_round_trip(self, flac_path, id3v23_path):
        """Covers written to FLAC and ID3v2 read back unchanged."""
        cover = CoverArt(data=helpers.png_bytes(), mime_type="image/png", description="front")
        for path in (flac_path, id3v23_path):
            assert write_cover(path, cover)
            found = read_cover(path)
            assert found.data == cover.data
            assert found.mime_type == "image/png"
            assert found.description == "front"
            assert remove_cover(path)
            assert read_cover(path) is None


class TestErrors:
    """Errors raised by the file-level API."""

    def test_missing_file(self, tmp_path):
        """Missing files raise AudioIOError."""
        with pytest.raises(AudioIOError):
            read_metadata(tmp_path / "missing.flac")

    def test_unsupported(self, tmp_path):
        """Unknown content raises UnsupportedFormatError."""
        path = tmp_path / "a.wav"
        path.write_bytes(b"RIFF" + b"\x00" * 100)
        with pytest.raises(UnsupportedFormatError):
            read_metadata(path)

    def test_read_only_formats(self, mp4_path, ape_path):
        """MP4 and APE cannot be written."""
        for path in (mp4_path, ape_path):
            before = path.read_bytes()
            with pytest.raises(UnsupportedFormatError):
                write_metadata(path, Metadata(title="x"))
            assert path.read_bytes() == before

    def test_ogg_cover_unsupported(self, ogg_path):
        """Covers cannot be written to Ogg files."""
        with pytest.raises(UnsupportedFormatError):
            write_cover(ogg_path, CoverArt(data=b"x"))

    def test_explicit_format(self, flac_path):
        """An explicit format skips detection; unknown names are rejected."""
        assert read_metadata(flac_path, "flac").title == "Foo"
        assert read_metadata(flac_path, FormatKind.FLAC).title == "Foo"
        with pytest.raises(TagParseError, match="Unknown format"):
            read_metadata(flac_path, "wma")

    def test_non_atomic_write(self, flac_path):
        """atomic=False writes in place."""
        assert write_metadata(flac_path, Metadata(title="In place"), atomic=False)
        assert read_metadata(flac_path).title == "In place"

    def test_atomic_write_keeps_mode(self, flac_path):
        """Atomic rewrites keep the permission bits and leave no temp files."""
        os.chmod(flac_path, 0o640)
        write_metadata(flac_path, Metadata(title="Mode"))
        assert (os.stat(flac_path).st_mode & 0o777) == 0o640
        assert [p.name for p in flac_path.parent.iterdir() if p.name.endswith(".tmp")] == []


class TestAudioFile:
    """Test the AudioFile wrapper."""

    def test_file_type_and_version(self, id3v23_path, id3v24_path, id3v1_path):
        """Format and version are reported per file."""
        assert AudioFile(id3v23_path).file_type is FormatKind.ID3V2
        assert AudioFile(id3v23_path).get_version() == "2.3"
        assert AudioFile(id3v24_path).get_version() == "2.4"
        assert AudioFile(id3v1_path).get_version() == "1.1"

    def test_get_metadata_json(self, flac_path):
        """get_metadata returns a JSON object string."""
        data = json.loads(AudioFile(flac_path).get_metadata())
        assert data == {"title": "Foo", "artist": "Bar", "lyrics": "la la la"}

    def test_set_metadata(self, flac_path):
        """set_metadata applies a JSON update."""
        audio = AudioFile(flac_path)
        assert audio.set_metadata('{"title": "Set", "artist": null}')
        metadata = audio.read()
        assert metadata.title == "Set"
        assert metadata.artist is None

    def test_set_metadata_invalid(self, flac_path):
        """Invalid JSON raises TagParseError and leaves the file alone."""
        before = flac_path.read_bytes()
        with pytest.raises(TagParseError):
            AudioFile(flac_path).set_metadata("{oops")
        assert flac_path.read_bytes() == before

    def test_cover_methods(self, id3v23_path):
        """set_cover, get_cover, remove_cover."""
        audio = AudioFile(id3v23_path)
        assert audio.get_cover() is None
        assert audio.set_cover(CoverArt(data=helpers.jpeg_bytes()))
        assert audio.get_cover().mime_type == "image/jpeg"
        assert audio.remove_cover()
        assert audio.get_cover() is None

    def test_export_cover_default_path(self, flac_path):
        """The cover is saved as <stem>.cover.<ext> next to the file."""
        png = helpers.png_bytes()
        audio = AudioFile(flac_path)
        audio.set_cover(CoverArt(data=png, mime_type="image/png"))
        output = audio.export_cover()
        assert output == flac_path.with_name("song.cover.png")
        assert output.read_bytes() == png

    def test_export_cover_explicit_path(self, flac_path, tmp_path):
        """An explicit output path is used as given."""
        audio = AudioFile(flac_path)
        audio.set_cover(CoverArt(data=b"jpegdata"))
        target = tmp_path / "out" / "cover.jpg"
        target.parent.mkdir()
        assert audio.export_cover(target) == target
        assert target.read_bytes() == b"jpegdata"

    def test_export_without_cover(self, flac_path):
        """No cover, nothing exported."""
        assert AudioFile(flac_path).export_cover() is None

    def test_info(self, flac_path):
        """info() combines file facts and codec details."""
        info = AudioFile(flac_path).info()
        assert info["path"] == str(flac_path)
        assert info["format"] == "flac"
        assert info["version"] == "flac"
        assert info["file_size"] == flac_path.stat().st_size
        assert info["sample_rate"] == 44100

    def test_config_settings(self, tmp_path, id3v23_path):
        """Config supplies strictness, atomicity and ID3 padding."""
        config = Config(tmp_path / "config.toml")
        config.set_strict(True)
        config.set_atomic(False)
        config.set_id3_padding(10)
        audio = AudioFile(id3v23_path, config=config)
        assert audio.strict
        assert not audio.atomic
        audio.write(Metadata(comment="x" * 500))
        data = id3v23_path.read_bytes()
        assert Id3v2Header.from_bytes(data).size == Id3v2Tag.from_bytes(data).frames_size() + 10
        assert read_metadata(id3v23_path).comment == "x" * 500

    def test_repr(self, flac_path):
        """repr shows the path."""
        assert "song.flac" in repr(AudioFile(flac_path))
