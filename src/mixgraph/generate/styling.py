"""
Styling pass: reorder a finished playlist by style, mood and complexity.

Pure post-processing; the stores are never consulted. Stages run in order
(style, mood, complexity) and each one fully re-sorts the list, so the last
sorting stage wins. Missing BPM sorts as 0.
"""

import logging
from functools import cmp_to_key
from typing import List, Optional, Sequence

import numpy as np

from ..models import PlaylistTrack, Track, renumber

logger = logging.getLogger(__name__)


def _bpm(track: Track) -> float:
    return track.bpm or 0.0


def _sort_by_bpm(tracks: List[Track], descending: bool) -> List[Track]:
    return sorted(tracks, key=_bpm, reverse=descending)


def _shuffle_by_bpm_gap(tracks: List[Track], rng: np.random.Generator) -> List[Track]:
    # Comparator sign is re-rolled on every comparison
    def compare(a: Track, b: Track) -> float:
        sign = 1 if rng.random() > 0.5 else -1
        return (_bpm(b) - _bpm(a)) * sign

    return sorted(tracks, key=cmp_to_key(compare))


def apply_styling(
    playlist: Sequence[PlaylistTrack],
    style: str = "balanced",
    mood: str = "progressive",
    transition_complexity: str = "moderate",
    rng: Optional[np.random.Generator] = None,
) -> List[PlaylistTrack]:
    """
    Reorder a playlist and renumber its positions.

    Args:
        playlist: Completed playlist (not modified)
        style: "experimental" (BPM descending), "safe" (ascending) or "balanced"
        mood: "energetic" (BPM descending), "chill" (ascending) or "progressive"
        transition_complexity: "complex" applies a randomized BPM-gap sort
        rng: Random source for the complex stage

    Returns:
        New playlist with positions 0..n-1 in the final order
    """
    enhanced: List[Track] = list(playlist)

    if style == "experimental":
        enhanced = _sort_by_bpm(enhanced, descending=True)
    elif style == "safe":
        enhanced = _sort_by_bpm(enhanced, descending=False)

    if mood == "energetic":
        enhanced = _sort_by_bpm(enhanced, descending=True)
    elif mood == "chill":
        enhanced = _sort_by_bpm(enhanced, descending=False)

    if transition_complexity == "complex":
        enhanced = _shuffle_by_bpm_gap(enhanced, rng if rng is not None else np.random.default_rng())

    logger.debug(
        f"Styled playlist (style={style}, mood={mood}, complexity={transition_complexity}): "
        f"{[t.id for t in enhanced]}"
    )
    return renumber(enhanced)
