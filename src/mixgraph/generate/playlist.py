"""
Playlist generation entry points.

Reads the catalog, the transition history and the seed track once, builds a
fresh TransitionGraph, runs the greedy sequencer and optionally applies the
styling pass. A missing seed or unreadable store fails the whole call; a
short playlist (pool exhausted) is a normal result.
"""

import logging
from typing import List, Optional

import numpy as np

from ..models import PlaylistTrack
from ..stores import StoreError, TrackStore, TransitionStore
from .graph import TransitionGraph
from .options import PlaylistOptions, AIPlaylistOptions
from .selector import sequence_playlist
from .styling import apply_styling

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when a playlist cannot be generated."""
    pass


class SeedTrackNotFoundError(GenerationError):
    """Raised when the seed track is not in the TrackStore."""
    pass


class StoreUnavailableError(GenerationError):
    """Raised when track or transition data cannot be read."""
    pass


def generate_playlist(
    seed_track_id: str,
    track_store: TrackStore,
    transition_store: TransitionStore,
    options: Optional[PlaylistOptions] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[PlaylistTrack]:
    """
    Generate a playlist starting from a seed track.

    Args:
        seed_track_id: ID of the first track
        track_store: Catalog source
        transition_store: Transition history source
        options: Generation options (defaults if None)
        rng: Random source for candidate selection

    Returns:
        Ordered playlist, seed first, at most options.target_length long

    Raises:
        SeedTrackNotFoundError: If the seed track does not exist
        StoreUnavailableError: If tracks or transitions cannot be read
    """
    options = options or PlaylistOptions()

    try:
        seed = track_store.get_track(seed_track_id)
    except StoreError as e:
        raise StoreUnavailableError(f"Failed to fetch seed track {seed_track_id}: {e}") from e

    if seed is None:
        raise SeedTrackNotFoundError(f"Seed track not found: {seed_track_id}")

    try:
        tracks = track_store.list_tracks()
        transitions = transition_store.list_transitions()
    except StoreError as e:
        raise StoreUnavailableError(f"Failed to fetch tracks or transitions: {e}") from e

    if tracks is None or transitions is None:
        raise StoreUnavailableError("Failed to fetch tracks or transitions")

    logger.info(
        f"Generating playlist from {seed_track_id}: {len(tracks)} tracks, "
        f"{len(transitions)} transition records"
    )

    graph = TransitionGraph.from_edges(transitions)
    return sequence_playlist(seed, tracks, graph, options, rng=rng)


def generate_ai_playlist(
    seed_track_id: str,
    track_store: TrackStore,
    transition_store: TransitionStore,
    options: Optional[AIPlaylistOptions] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[PlaylistTrack]:
    """
    Generate a base playlist, then reorder it by style, mood and complexity.

    Args:
        seed_track_id: ID of the first track
        track_store: Catalog source
        transition_store: Transition history source
        options: AI options (defaults if None)
        rng: Random source shared by selection and styling

    Returns:
        Styled playlist with positions renumbered

    Raises:
        GenerationError: As for generate_playlist
    """
    options = options or AIPlaylistOptions()
    rng = rng if rng is not None else np.random.default_rng()

    base = generate_playlist(
        seed_track_id,
        track_store,
        transition_store,
        options=options.base_options(),
        rng=rng,
    )

    styled = apply_styling(
        base,
        style=options.style,
        mood=options.mood,
        transition_complexity=options.transition_complexity,
        rng=rng,
    )
    logger.info(
        f"✅ AI playlist ready: {len(styled)} tracks "
        f"(style={options.style}, mood={options.mood}, "
        f"complexity={options.transition_complexity})"
    )
    return styled
