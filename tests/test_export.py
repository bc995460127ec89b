"""
Unit tests for playlist export formats.
"""

import pytest
from mixgraph.export.formats import (
    UnsupportedFormatError,
    export_playlist,
    to_m3u,
    to_rekordbox_xml,
    to_virtualdj_csv,
    write_export,
)
from mixgraph.models import Track, renumber


@pytest.fixture
def playlist():
    return renumber([
        Track("1", "Strobe", "deadmau5", bpm=128.0, key="8A"),
        Track("2", "Rock & Roll", "Fred <Again>", bpm=124.5, key=None),
        Track("3", 'Say "Hello"', "O'Neil", bpm=None, key="Am"),
    ])


class TestM3U:
    """Test M3U export."""

    def test_line_count(self, playlist):
        lines = to_m3u(playlist).split("\n")
        assert lines[0] == "#EXTM3U"
        assert len(lines) == 1 + 2 * len(playlist)

    def test_entries(self, playlist):
        lines = to_m3u(playlist).split("\n")
        assert lines[1] == "#EXTINF:-1,deadmau5 - Strobe"
        assert lines[2] == "#EXTALB:128 BPM, Key: 8A"
        assert lines[4] == "#EXTALB:124.5 BPM, Key: Unknown"

    def test_missing_bpm(self, playlist):
        lines = to_m3u(playlist).split("\n")
        assert lines[6] == "#EXTALB: BPM, Key: Am"

    def test_empty(self):
        assert to_m3u([]) == "#EXTM3U"


class TestRekordbox:
    """Test Rekordbox XML export."""

    def test_structure(self, playlist):
        xml = to_rekordbox_xml(playlist)
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert '<COLLECTION Entries="3">' in xml
        assert xml.count("<TRACK ") == 3
        assert xml.rstrip().endswith("</DJ_PLAYLISTS>")

    def test_track_ids_follow_order(self, playlist):
        xml = to_rekordbox_xml(playlist)
        assert xml.index('TrackID="1"') < xml.index('TrackID="2"') < xml.index('TrackID="3"')

    def test_escaping(self, playlist):
        xml = to_rekordbox_xml(playlist)
        assert 'Name="Rock &amp; Roll"' in xml
        assert 'Artist="Fred &lt;Again&gt;"' in xml
        assert 'Name="Say &quot;Hello&quot;"' in xml
        assert 'Artist="O&apos;Neil"' in xml

    def test_optional_attributes(self, playlist):
        lines = to_rekordbox_xml(playlist).split("\n")
        track_lines = [line for line in lines if "<TRACK " in line]
        assert 'Tempo="128"' in track_lines[0]
        assert 'Tonality="8A"' in track_lines[0]
        assert "Tonality" not in track_lines[1]
        assert "Tempo" not in track_lines[2]


class TestBpmPrecision:
    """BPM values are written without rounding."""

    @pytest.fixture
    def precise(self):
        return renumber([Track("a", "Precise", "DJ", bpm=123.4567, key="8A")])

    def test_rekordbox_keeps_digits(self, precise):
        assert 'Tempo="123.4567"' in to_rekordbox_xml(precise)

    def test_csv_keeps_digits(self, precise):
        assert to_virtualdj_csv(precise).split("\n")[1] == '"Precise","DJ",123.4567,8A'

    def test_m3u_keeps_digits(self, precise):
        assert to_m3u(precise).split("\n")[2] == "#EXTALB:123.4567 BPM, Key: 8A"

    def test_whole_bpm_has_no_decimal(self):
        tracks = renumber([Track("a", "t", "x", bpm=128.0)])
        assert 'Tempo="128"' in to_rekordbox_xml(tracks)


class TestVirtualDJ:
    """Test VirtualDJ CSV export."""

    def test_header(self, playlist):
        assert to_virtualdj_csv(playlist).split("\n")[0] == "Title,Artist,BPM,Key"

    def test_rows(self, playlist):
        rows = to_virtualdj_csv(playlist).split("\n")[1:]
        assert rows[0] == '"Strobe","deadmau5",128,8A'
        assert rows[1] == '"Rock & Roll","Fred <Again>",124.5,'

    def test_quote_doubling(self, playlist):
        rows = to_virtualdj_csv(playlist).split("\n")[1:]
        assert rows[2] == '"Say ""Hello""","O\'Neil",,Am'


class TestExportPlaylist:
    """Test format dispatch and file output."""

    @pytest.mark.parametrize("fmt", ["rekordbox", "virtualdj", "m3u"])
    def test_known_formats(self, playlist, fmt):
        assert export_playlist(playlist, fmt)

    def test_unknown_format(self, playlist):
        with pytest.raises(UnsupportedFormatError):
            export_playlist(playlist, "traktor")

    def test_unknown_format_is_value_error(self, playlist):
        with pytest.raises(ValueError):
            export_playlist(playlist, "serato")

    def test_write_adds_extension(self, playlist, tmp_path):
        path = write_export(playlist, "m3u", str(tmp_path / "sets" / "friday"))
        assert path.name == "friday.m3u"
        assert path.read_text(encoding="utf-8") == to_m3u(playlist)

    def test_write_keeps_given_suffix(self, playlist, tmp_path):
        path = write_export(playlist, "virtualdj", str(tmp_path / "friday.txt"))
        assert path.name == "friday.txt"
        assert path.exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
