"""
Playlist export to DJ-software text formats.

- rekordbox : pseudo-Rekordbox XML (DJ_PLAYLISTS / COLLECTION / TRACK)
- virtualdj : CSV with quoted title and artist
- m3u       : #EXTM3U header, then #EXTINF and #EXTALB per track
"""

import logging
from pathlib import Path
from typing import Sequence

from ..models import Track

logger = logging.getLogger(__name__)

EXPORT_EXTENSIONS = {
    "rekordbox": "xml",
    "virtualdj": "csv",
    "m3u": "m3u",
}


class UnsupportedFormatError(ValueError):
    """Raised for an export format name we do not know."""
    pass


def escape_xml(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def escape_csv(value: str) -> str:
    """Double embedded quotes; the caller wraps the field in quotes."""
    return value.replace('"', '""')


def _bpm_text(bpm) -> str:
    if not bpm:
        return ""
    bpm = float(bpm)
    if bpm.is_integer():
        return str(int(bpm))
    return repr(bpm)


def to_rekordbox_xml(tracks: Sequence[Track]) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<DJ_PLAYLISTS Version="1.0.0">',
        f'  <COLLECTION Entries="{len(tracks)}">',
    ]
    for index, track in enumerate(tracks, start=1):
        attrs = [
            f'TrackID="{index}"',
            f'Name="{escape_xml(track.title)}"',
            f'Artist="{escape_xml(track.artist)}"',
        ]
        if track.bpm:
            attrs.append(f'Tempo="{_bpm_text(track.bpm)}"')
        if track.key:
            attrs.append(f'Tonality="{escape_xml(track.key)}"')
        lines.append(f"    <TRACK {' '.join(attrs)} />")
    lines.extend(["  </COLLECTION>", "</DJ_PLAYLISTS>"])
    return "\n".join(lines)


def to_virtualdj_csv(tracks: Sequence[Track]) -> str:
    lines = ["Title,Artist,BPM,Key"]
    for track in tracks:
        lines.append(
            f'"{escape_csv(track.title)}","{escape_csv(track.artist)}",'
            f"{_bpm_text(track.bpm)},{track.key or ''}"
        )
    return "\n".join(lines)


def to_m3u(tracks: Sequence[Track]) -> str:
    lines = ["#EXTM3U"]
    for track in tracks:
        lines.append(f"#EXTINF:-1,{track.artist} - {track.title}")
        lines.append(f"#EXTALB:{_bpm_text(track.bpm)} BPM, Key: {track.key or 'Unknown'}")
    return "\n".join(lines)


_EXPORTERS = {
    "rekordbox": to_rekordbox_xml,
    "virtualdj": to_virtualdj_csv,
    "m3u": to_m3u,
}


def export_playlist(tracks: Sequence[Track], fmt: str) -> str:
    """
    Serialize a playlist.

    Args:
        tracks: Playlist in playback order
        fmt: "rekordbox", "virtualdj" or "m3u"

    Returns:
        Exported text

    Raises:
        UnsupportedFormatError: For any other format name
    """
    exporter = _EXPORTERS.get(fmt)
    if exporter is None:
        raise UnsupportedFormatError(f"Unsupported export format: {fmt}")
    return exporter(tracks)


def write_export(tracks: Sequence[Track], fmt: str, output_path: str) -> Path:
    """
    Export a playlist and write it to disk.

    If `output_path` has no suffix the format's extension is added.

    Returns:
        Path of the written file
    """
    content = export_playlist(tracks, fmt)
    path = Path(output_path)
    if not path.suffix:
        path = path.with_suffix(f".{EXPORT_EXTENSIONS[fmt]}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info(f"Wrote {fmt} export: {path} ({len(tracks)} tracks)")
    return path
