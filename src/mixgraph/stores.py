"""
Store interfaces consumed by the generation engine.

The engine never reaches for a global client: every call receives the
stores it reads from. `InMemoryStore` implements all three interfaces and
backs the tests and small scripts; `mixgraph.db.Database` is the SQLite
implementation.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Tuple, Iterable, Protocol

from .models import Track, PlaylistTrack, TransitionEdge

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a store cannot read or write its data."""
    pass


class TrackStore(Protocol):
    def get_track(self, track_id: str) -> Optional[Track]: ...

    def list_tracks(self) -> List[Track]: ...

    def find_track(self, artist: str, title: str) -> Optional[Track]: ...

    def add_track(
        self, title: str, artist: str, bpm: Optional[float] = None, key: Optional[str] = None
    ) -> Track: ...


class TransitionStore(Protocol):
    def list_transitions(self) -> List[TransitionEdge]: ...

    def get_frequency(self, from_id: str, to_id: str) -> int: ...

    def record_transition(self, from_id: str, to_id: str) -> int: ...


class PlaylistStore(Protocol):
    def save_playlist(self, name: str, tracks: List[PlaylistTrack], user_id: str) -> str: ...

    def save_rating(
        self, user_id: str, playlist_id: Optional[str], rating: int, is_ai_generated: bool
    ) -> None: ...


class InMemoryStore:
    """Dictionary-backed track, transition and playlist store."""

    def __init__(
        self,
        tracks: Iterable[Track] = (),
        transitions: Iterable[TransitionEdge] = (),
    ):
        """
        Args:
            tracks: Initial catalog
            transitions: Initial transition history
        """
        self.tracks: Dict[str, Track] = {t.id: t for t in tracks}
        self.transitions: Dict[Tuple[str, str], int] = {
            (e.from_id, e.to_id): e.frequency for e in transitions
        }
        self.playlists: Dict[str, Dict[str, Any]] = {}
        self.ratings: List[Dict[str, Any]] = []

    # Tracks

    def get_track(self, track_id: str) -> Optional[Track]:
        return self.tracks.get(track_id)

    def list_tracks(self) -> List[Track]:
        return list(self.tracks.values())

    def find_track(self, artist: str, title: str) -> Optional[Track]:
        """Case-insensitive exact match on artist and title."""
        artist_l, title_l = artist.lower(), title.lower()
        for track in self.tracks.values():
            if track.artist.lower() == artist_l and track.title.lower() == title_l:
                return track
        return None

    def add_track(
        self, title: str, artist: str, bpm: Optional[float] = None, key: Optional[str] = None
    ) -> Track:
        track = Track(id=str(uuid.uuid4()), title=title, artist=artist, bpm=bpm, key=key)
        self.tracks[track.id] = track
        logger.debug(f"Added track: {track.id} ({artist} - {title})")
        return track

    # Transitions

    def list_transitions(self) -> List[TransitionEdge]:
        return [
            TransitionEdge(from_id=f, to_id=t, frequency=freq)
            for (f, t), freq in self.transitions.items()
        ]

    def get_frequency(self, from_id: str, to_id: str) -> int:
        return self.transitions.get((from_id, to_id), 0)

    def record_transition(self, from_id: str, to_id: str) -> int:
        """Increment the observed count for from_id -> to_id; returns the new count."""
        count = self.transitions.get((from_id, to_id), 0) + 1
        self.transitions[(from_id, to_id)] = count
        return count

    # Playlists

    def save_playlist(self, name: str, tracks: List[PlaylistTrack], user_id: str) -> str:
        playlist_id = str(uuid.uuid4())
        self.playlists[playlist_id] = {
            "name": name,
            "user_id": user_id,
            "track_ids": [t.id for t in sorted(tracks, key=lambda t: t.position)],
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        logger.debug(f"Saved playlist {playlist_id} ({len(tracks)} tracks)")
        return playlist_id

    def save_rating(
        self, user_id: str, playlist_id: Optional[str], rating: int, is_ai_generated: bool
    ) -> None:
        self.ratings.append(
            {
                "user_id": user_id,
                "playlist_id": playlist_id,
                "rating": rating,
                "is_ai_generated": is_ai_generated,
            }
        )
