"""
SQLite Database Management for MixGraph.

Manages the track catalog, transition history, saved playlists and ratings.

- Schema: tracks (title, artist, BPM, key)
- History: transitions (from_track_id, to_track_id, frequency)
- Saved sets: playlists + playlist_tracks, playlist_ratings
- Atomic writes, no concurrent access (single process)

Implements the TrackStore, TransitionStore and PlaylistStore interfaces.
Every sqlite3 failure surfaces as StoreError.
"""

import sqlite3
import logging
import uuid
from pathlib import Path
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone

from .models import Track, PlaylistTrack, TransitionEdge
from .stores import StoreError

logger = logging.getLogger(__name__)


class Database:
    """SQLite database manager for MixGraph metadata."""

    SCHEMA_VERSION = 1

    # SQL schema definition
    SCHEMA = """
    -- Tracks table: catalog metadata
    CREATE TABLE IF NOT EXISTS tracks (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        artist TEXT NOT NULL,
        bpm REAL,
        key TEXT,
        created_at TEXT NOT NULL
    );

    -- Transition history: how often to_track followed from_track
    CREATE TABLE IF NOT EXISTS transitions (
        from_track_id TEXT NOT NULL,
        to_track_id TEXT NOT NULL,
        frequency INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (from_track_id, to_track_id),
        FOREIGN KEY (from_track_id) REFERENCES tracks(id),
        FOREIGN KEY (to_track_id) REFERENCES tracks(id)
    );

    -- Saved playlists
    CREATE TABLE IF NOT EXISTS playlists (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS playlist_tracks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        playlist_id TEXT NOT NULL,
        track_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        FOREIGN KEY (playlist_id) REFERENCES playlists(id),
        FOREIGN KEY (track_id) REFERENCES tracks(id)
    );

    CREATE TABLE IF NOT EXISTS playlist_ratings (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        playlist_id TEXT,
        rating INTEGER NOT NULL,
        is_ai_generated INTEGER NOT NULL,
        rated_at TEXT NOT NULL
    );

    -- Schema version tracking
    CREATE TABLE IF NOT EXISTS schema_version (
        version INTEGER PRIMARY KEY,
        updated_at TEXT NOT NULL
    );

    -- Indices for common queries
    CREATE INDEX IF NOT EXISTS idx_tracks_artist_title ON tracks(artist, title);
    CREATE INDEX IF NOT EXISTS idx_transitions_from ON transitions(from_track_id);
    CREATE INDEX IF NOT EXISTS idx_playlist_tracks_playlist ON playlist_tracks(playlist_id);
    """

    def __init__(self, db_path: str = "data/db/mixgraph.sqlite"):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
        """
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        """Open database connection and initialize schema."""
        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        logger.info(f"Connected to database: {self.db_path}")
        self._initialize_schema()

    def disconnect(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("Database disconnected")

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    def _cursor(self) -> sqlite3.Cursor:
        if self.conn is None:
            raise StoreError("Database is not connected")
        return self.conn.cursor()

    def _initialize_schema(self) -> None:
        """Initialize or migrate schema."""
        cursor = self._cursor()

        # Check current schema version
        cursor.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
        )
        if not cursor.fetchone():
            # First initialization
            logger.info("Initializing database schema...")
            cursor.executescript(self.SCHEMA)
            cursor.execute(
                "INSERT INTO schema_version (version, updated_at) VALUES (?, ?)",
                (self.SCHEMA_VERSION, datetime.now(timezone.utc).isoformat()),
            )
            self.conn.commit()
            logger.info(f"✅ Database schema initialized (v{self.SCHEMA_VERSION})")
        else:
            cursor.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
            current_version = cursor.fetchone()[0]
            if current_version < self.SCHEMA_VERSION:
                logger.warning(
                    f"Schema version mismatch: {current_version} < {self.SCHEMA_VERSION}. "
                    f"Consider running migration."
                )

    @staticmethod
    def _row_to_track(row: sqlite3.Row) -> Track:
        return Track(
            id=row["id"],
            title=row["title"],
            artist=row["artist"],
            bpm=row["bpm"],
            key=row["key"],
        )

    # TrackStore

    def add_track(
        self, title: str, artist: str, bpm: Optional[float] = None, key: Optional[str] = None
    ) -> Track:
        """
        Insert a new track with a generated ID.

        Returns:
            The stored Track.
        """
        track = Track(id=str(uuid.uuid4()), title=title, artist=artist, bpm=bpm, key=key)
        self.put_track(track)
        return track

    def put_track(self, track: Track) -> None:
        """Add or update a track keeping its ID."""
        try:
            cursor = self._cursor()
            cursor.execute(
                """
                INSERT OR REPLACE INTO tracks (id, title, artist, bpm, key, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    track.id,
                    track.title,
                    track.artist,
                    track.bpm,
                    track.key,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to store track {track.id}: {e}") from e
        logger.debug(f"Added/updated track: {track.id}")

    def get_track(self, track_id: str) -> Optional[Track]:
        """
        Retrieve a track by ID.

        Returns:
            Track or None if not found.
        """
        try:
            cursor = self._cursor()
            cursor.execute("SELECT * FROM tracks WHERE id = ?", (track_id,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read track {track_id}: {e}") from e

        return self._row_to_track(row) if row else None

    def find_track(self, artist: str, title: str) -> Optional[Track]:
        """Case-insensitive lookup by artist and title."""
        try:
            cursor = self._cursor()
            cursor.execute(
                "SELECT * FROM tracks WHERE LOWER(artist) = LOWER(?) AND LOWER(title) = LOWER(?) LIMIT 1",
                (artist, title),
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to look up {artist} - {title}: {e}") from e

        return self._row_to_track(row) if row else None

    def list_tracks(self) -> List[Track]:
        """List the full catalog in insertion order."""
        try:
            cursor = self._cursor()
            cursor.execute("SELECT * FROM tracks ORDER BY rowid")
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list tracks: {e}") from e

        return [self._row_to_track(row) for row in rows]

    # TransitionStore

    def list_transitions(self) -> List[TransitionEdge]:
        try:
            cursor = self._cursor()
            cursor.execute("SELECT from_track_id, to_track_id, frequency FROM transitions")
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list transitions: {e}") from e

        return [
            TransitionEdge(
                from_id=row["from_track_id"],
                to_id=row["to_track_id"],
                frequency=row["frequency"],
            )
            for row in rows
        ]

    def get_frequency(self, from_id: str, to_id: str) -> int:
        try:
            cursor = self._cursor()
            cursor.execute(
                "SELECT frequency FROM transitions WHERE from_track_id = ? AND to_track_id = ?",
                (from_id, to_id),
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read transition {from_id} -> {to_id}: {e}") from e

        return row["frequency"] if row else 0

    def record_transition(self, from_id: str, to_id: str) -> int:
        """
        Record one more observation of from_id -> to_id.

        Returns:
            The updated frequency.
        """
        try:
            cursor = self._cursor()
            cursor.execute(
                """
                INSERT INTO transitions (from_track_id, to_track_id, frequency)
                VALUES (?, ?, 1)
                ON CONFLICT(from_track_id, to_track_id)
                DO UPDATE SET frequency = frequency + 1
                """,
                (from_id, to_id),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to record transition {from_id} -> {to_id}: {e}") from e

        return self.get_frequency(from_id, to_id)

    # PlaylistStore

    def save_playlist(self, name: str, tracks: List[PlaylistTrack], user_id: str) -> str:
        """
        Persist a playlist and its track positions in one transaction.

        Returns:
            The new playlist ID.
        """
        playlist_id = str(uuid.uuid4())
        try:
            cursor = self._cursor()
            cursor.execute(
                "INSERT INTO playlists (id, user_id, name, created_at) VALUES (?, ?, ?, ?)",
                (playlist_id, user_id, name, datetime.now(timezone.utc).isoformat()),
            )
            cursor.executemany(
                "INSERT INTO playlist_tracks (playlist_id, track_id, position) VALUES (?, ?, ?)",
                [(playlist_id, t.id, t.position) for t in tracks],
            )
            self.conn.commit()
        except sqlite3.Error as e:
            if self.conn is not None:
                self.conn.rollback()
            raise StoreError(f"Failed to save playlist {name!r}: {e}") from e

        logger.info(f"Saved playlist {playlist_id} ({name!r}, {len(tracks)} tracks)")
        return playlist_id

    def get_playlist_track_ids(self, playlist_id: str) -> List[str]:
        """Track IDs of a saved playlist in position order."""
        try:
            cursor = self._cursor()
            cursor.execute(
                "SELECT track_id FROM playlist_tracks WHERE playlist_id = ? ORDER BY position",
                (playlist_id,),
            )
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read playlist {playlist_id}: {e}") from e

        return [row["track_id"] for row in rows]

    def save_rating(
        self, user_id: str, playlist_id: Optional[str], rating: int, is_ai_generated: bool
    ) -> None:
        try:
            cursor = self._cursor()
            cursor.execute(
                """
                INSERT INTO playlist_ratings (user_id, playlist_id, rating, is_ai_generated, rated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    playlist_id,
                    rating,
                    int(is_ai_generated),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to save rating: {e}") from e

    def get_stats(self) -> Dict[str, Any]:
        """
        Get database statistics.

        Returns:
            Dictionary with catalog and history counts.
        """
        try:
            cursor = self._cursor()

            cursor.execute("SELECT COUNT(*) FROM tracks")
            total_tracks = cursor.fetchone()[0]

            cursor.execute("SELECT COUNT(*) FROM tracks WHERE bpm IS NOT NULL")
            tracks_with_bpm = cursor.fetchone()[0]

            cursor.execute("SELECT COUNT(*) FROM tracks WHERE key IS NOT NULL")
            tracks_with_key = cursor.fetchone()[0]

            cursor.execute("SELECT COUNT(*), COALESCE(SUM(frequency), 0) FROM transitions")
            edge_count, observed = cursor.fetchone()

            cursor.execute(
                "SELECT MIN(bpm) as min_bpm, MAX(bpm) as max_bpm, AVG(bpm) as avg_bpm FROM tracks WHERE bpm IS NOT NULL"
            )
            bpm_stats = dict(cursor.fetchone())
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read stats: {e}") from e

        return {
            "total_tracks": total_tracks,
            "tracks_with_bpm": tracks_with_bpm,
            "tracks_with_key": tracks_with_key,
            "transition_edges": edge_count,
            "observed_transitions": observed,
            "bpm_stats": bpm_stats,
        }
