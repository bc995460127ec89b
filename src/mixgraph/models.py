"""
Core data model shared by stores, generators and exporters.

Tracks and transition edges come from the stores and are never mutated here.
Playlists are plain lists of PlaylistTrack in playback order.
"""

from dataclasses import dataclass
from typing import Optional, List


@dataclass(frozen=True)
class Track:
    """Immutable container for catalog track data."""

    id: str
    title: str
    artist: str
    bpm: Optional[float] = None
    key: Optional[str] = None  # Free-form key name or Camelot notation


@dataclass(frozen=True)
class PlaylistTrack(Track):
    """A track placed at a position (0-based) inside one playlist."""

    position: int = 0

    @classmethod
    def from_track(cls, track: Track, position: int) -> "PlaylistTrack":
        return cls(
            id=track.id,
            title=track.title,
            artist=track.artist,
            bpm=track.bpm,
            key=track.key,
            position=position,
        )


@dataclass(frozen=True)
class TransitionEdge:
    """How often `to_id` historically followed `from_id` in a real set."""

    from_id: str
    to_id: str
    frequency: int = 0


def renumber(tracks: List[Track]) -> List[PlaylistTrack]:
    """
    Assign contiguous positions 0..n-1 in list order.

    Args:
        tracks: Tracks (or playlist tracks) in playback order

    Returns:
        New list of PlaylistTrack objects
    """
    return [PlaylistTrack.from_track(track, idx) for idx, track in enumerate(tracks)]
