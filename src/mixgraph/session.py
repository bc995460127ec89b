"""
Playlist editing session with debounced auto-save.

Every change to the playlist (re)starts a quiet-period timer; only the last
scheduled save runs, and a lock keeps at most one save in flight. Background
saves and ratings are best effort: failures are logged and dropped, never
retried, and never change the playlist the caller sees.
"""

import logging
import threading
from typing import List, Optional, Sequence

from .models import PlaylistTrack, Track, renumber
from .stores import PlaylistStore

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_DELAY = 5.0
AUTOSAVE_SUFFIX = " (Auto-saved)"


class PlaylistSession:
    """Holds one user's working playlist, its undo history and auto-save timer."""

    def __init__(
        self,
        playlist_store: PlaylistStore,
        user_id: Optional[str],
        name: str = "",
        autosave_delay: float = DEFAULT_AUTOSAVE_DELAY,
    ):
        """
        Args:
            playlist_store: Where auto-saves and ratings go
            user_id: Signed-in user, or None (auto-save and rating disabled)
            name: Playlist name; auto-save is skipped while empty
            autosave_delay: Quiet period in seconds before a save fires
        """
        self.store = playlist_store
        self.user_id = user_id
        self.name = name
        self.autosave_delay = autosave_delay
        self.last_saved_id: Optional[str] = None

        self._playlist: List[PlaylistTrack] = []
        self._history: List[List[PlaylistTrack]] = []
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._timer_lock = threading.Lock()
        self._save_lock = threading.Lock()

    @classmethod
    def from_config(
        cls, playlist_store: PlaylistStore, config, user_id: Optional[str], name: str = ""
    ) -> "PlaylistSession":
        """Build a session using the [session] auto-save delay."""
        delay = config.get("session", "autosave_delay_seconds", DEFAULT_AUTOSAVE_DELAY)
        return cls(playlist_store, user_id, name=name, autosave_delay=delay)

    @property
    def playlist(self) -> List[PlaylistTrack]:
        return list(self._playlist)

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    # Mutations

    def set_playlist(self, tracks: Sequence[Track]) -> None:
        """Replace the working playlist (e.g. after a new generation)."""
        self._commit(renumber(list(tracks)))

    def replace_track(self, to_id: str, new_track: Track) -> bool:
        """
        Swap the track with id `to_id` for `new_track` at the same position.

        Returns:
            True if the track was found and replaced
        """
        for index, track in enumerate(self._playlist):
            if track.id == to_id:
                updated = list(self._playlist)
                updated[index] = PlaylistTrack.from_track(new_track, index)
                self._commit(updated)
                return True
        logger.debug(f"Track {to_id} not in playlist; nothing replaced")
        return False

    def move_track(self, index: int, direction: str) -> bool:
        """
        Move a track one slot "up" or "down".

        Returns:
            False (no change) at the playlist edges or for a bad index
        """
        if direction not in ("up", "down"):
            raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")
        target = index - 1 if direction == "up" else index + 1
        if not (0 <= index < len(self._playlist)) or not (0 <= target < len(self._playlist)):
            return False

        updated = list(self._playlist)
        updated[index], updated[target] = updated[target], updated[index]
        self._commit(renumber(updated))
        return True

    def remove_track(self, index: int) -> bool:
        """
        Drop the track at `index` and close the gap.

        Returns:
            False (no change) for an index outside the playlist
        """
        if not 0 <= index < len(self._playlist):
            return False

        removed = self._playlist[index]
        self._commit(renumber(self._playlist[:index] + self._playlist[index + 1:]))
        logger.debug(f"Removed {removed.id} from position {index}")
        return True

    def undo(self) -> bool:
        """Restore the previous playlist state, if any."""
        if not self._history:
            return False
        self._playlist = self._history.pop()
        self._schedule_save()
        return True

    def _commit(self, updated: List[PlaylistTrack]) -> None:
        if self._playlist:
            self._history.append(self._playlist)
        self._playlist = updated
        self._schedule_save()

    # Auto-save

    def _schedule_save(self) -> None:
        if not self._playlist:
            return
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = threading.Timer(self.autosave_delay, self._autosave, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _autosave(self, generation: int) -> None:
        with self._timer_lock:
            if generation != self._generation:
                return  # Superseded by a later change
            self._timer = None
        self._save_now()

    def _save_now(self) -> None:
        if not self.user_id or not self.name or not self._playlist:
            return

        with self._save_lock:
            snapshot = list(self._playlist)
            try:
                self.last_saved_id = self.store.save_playlist(
                    f"{self.name}{AUTOSAVE_SUFFIX}", snapshot, self.user_id
                )
                logger.debug(f"Auto-saved {len(snapshot)} tracks as {self.last_saved_id}")
            except Exception as e:
                logger.error(f"Auto-save failed: {e}", exc_info=True)

    def save(self) -> str:
        """
        Save the playlist under its plain name.

        Unlike auto-save, failures reach the caller.

        Returns:
            ID of the saved playlist

        Raises:
            ValueError: If there is no user, no name or no tracks
            StoreError: If the store rejects the save
        """
        if not self.user_id:
            raise ValueError("Cannot save playlist: no signed-in user")
        if not self.name:
            raise ValueError("Cannot save playlist: name is empty")
        if not self._playlist:
            raise ValueError("Cannot save playlist: no tracks")

        with self._save_lock:
            snapshot = list(self._playlist)
            self.last_saved_id = self.store.save_playlist(self.name, snapshot, self.user_id)

        logger.info(f"✅ Saved playlist {self.name!r} ({len(snapshot)} tracks) as {self.last_saved_id}")
        return self.last_saved_id

    @property
    def save_pending(self) -> bool:
        with self._timer_lock:
            return self._timer is not None

    def flush(self) -> None:
        """Run a pending auto-save immediately."""
        with self._timer_lock:
            if self._timer is None:
                return
            self._timer.cancel()
            self._timer = None
            self._generation += 1
        self._save_now()

    def close(self) -> None:
        """Drop any pending auto-save."""
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1

    # Ratings

    def rate(self, rating: int, is_ai_generated: bool = False) -> bool:
        """
        Submit a 1-5 rating for the current playlist.

        Returns:
            True if the rating was stored
        """
        if not self.user_id:
            logger.warning("Rating skipped: no signed-in user")
            return False
        if not 1 <= rating <= 5:
            raise ValueError(f"rating must be between 1 and 5, got {rating}")

        playlist_id = self.last_saved_id
        try:
            self.store.save_rating(self.user_id, playlist_id, rating, is_ai_generated)
        except Exception as e:
            logger.error(f"Error saving rating: {e}", exc_info=True)
            return False

        logger.info(f"Rated playlist {playlist_id}: {rating}/5")
        return True
