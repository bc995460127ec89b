"""
Candidate Scorer: composite score for "play this track next".

Four additive factors, none bounded to [0, 1]:

1. History: ln(frequency + 1) * 3
2. BPM progression: closeness to the profile's ideal rise, minus 2 when the
   jump exceeds max_bpm_change (penalty only, the candidate stays eligible)
3. Harmonic: Camelot compatibility * 2 (when harmonic mixing is preferred)
4. Energy curve: closeness to the running BPM target (after 3+ tracks)

The total is only meaningful relative to other candidates for the same slot.
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from ..analyze.key import compatibility
from ..models import Track
from .energy import EnergyProfile, energy_curve_target
from .graph import TransitionGraph
from .options import PlaylistOptions

logger = logging.getLogger(__name__)

HISTORY_WEIGHT = 3.0
HARMONIC_WEIGHT = 2.0
BPM_JUMP_PENALTY = 2.0


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-factor contributions to a candidate's score."""

    history: float = 0.0
    bpm_progression: float = 0.0
    bpm_penalty: float = 0.0
    harmonic: float = 0.0
    energy_curve: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.history
            + self.bpm_progression
            - self.bpm_penalty
            + self.harmonic
            + self.energy_curve
        )


def score_breakdown(
    current: Track,
    candidate: Track,
    playlist_so_far: Sequence[Track],
    profile: EnergyProfile,
    options: PlaylistOptions,
    graph: TransitionGraph,
) -> ScoreBreakdown:
    """
    Compute each scoring factor for one candidate.

    Args:
        current: Last track of the playlist
        candidate: Track being considered for the next slot
        playlist_so_far: Playlist built so far, in order
        profile: Active energy profile
        options: Generation options
        graph: Transition graph for this generation run

    Returns:
        ScoreBreakdown with every factor filled in
    """
    history = math.log(graph.frequency(current.id, candidate.id) + 1) * HISTORY_WEIGHT

    bpm_progression = 0.0
    bpm_penalty = 0.0
    if current.bpm and candidate.bpm:
        bpm_diff = candidate.bpm - current.bpm
        if abs(bpm_diff) <= profile.bpm_variance:
            closeness = 1 - abs(bpm_diff - profile.bpm_increase) / profile.bpm_variance
            bpm_progression = profile.weight * closeness
        if abs(bpm_diff) > options.max_bpm_change:
            bpm_penalty = BPM_JUMP_PENALTY

    harmonic = 0.0
    if options.prefer_harmonic_mixing and current.key and candidate.key:
        harmonic = compatibility(current.key, candidate.key) * HARMONIC_WEIGHT

    energy_curve = 0.0
    if len(playlist_so_far) > 2 and candidate.bpm:
        target_bpm = energy_curve_target(playlist_so_far, profile)
        energy_curve = 1 - abs(candidate.bpm - target_bpm) / (profile.bpm_variance * 2)

    return ScoreBreakdown(
        history=history,
        bpm_progression=bpm_progression,
        bpm_penalty=bpm_penalty,
        harmonic=harmonic,
        energy_curve=energy_curve,
    )


def score_candidate(
    current: Track,
    candidate: Track,
    playlist_so_far: Sequence[Track],
    profile: EnergyProfile,
    options: PlaylistOptions,
    graph: TransitionGraph,
) -> float:
    """Composite score of `candidate` as the track after `current`."""
    breakdown = score_breakdown(current, candidate, playlist_so_far, profile, options, graph)
    logger.debug(
        f"Candidate {candidate.id}: history={breakdown.history:.2f}, "
        f"bpm={breakdown.bpm_progression:.2f}-{breakdown.bpm_penalty:.0f}, "
        f"harmonic={breakdown.harmonic:.2f}, curve={breakdown.energy_curve:.2f}, "
        f"total={breakdown.total:.2f}"
    )
    return breakdown.total
