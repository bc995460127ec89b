"""
Energy profiles and energy-flow heuristics.

BPM stands in for energy throughout: a set "builds" when tempo rises.

- Profiles tune how fast BPM should rise between tracks
- Energy curve: candidates close to the running BPM target score higher
- Energy flow: explanation score for a single transition (slight rises best)
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from ..models import Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnergyProfile:
    """Named tuning preset for BPM progression."""

    name: str
    bpm_increase: float  # Ideal BPM rise per transition
    bpm_variance: float  # Tolerated deviation around the ideal
    weight: float  # Multiplier for the BPM progression factor


ENERGY_PROFILES: Dict[str, EnergyProfile] = {
    "smooth": EnergyProfile("smooth", bpm_increase=2, bpm_variance=4, weight=1.5),
    "dynamic": EnergyProfile("dynamic", bpm_increase=4, bpm_variance=8, weight=1.0),
    "high": EnergyProfile("high", bpm_increase=6, bpm_variance=12, weight=2.0),
}


def get_energy_profile(mode: str) -> EnergyProfile:
    """
    Look up an energy profile by name.

    Raises:
        ValueError: If the mode is not smooth, dynamic or high.
    """
    try:
        return ENERGY_PROFILES[mode]
    except KeyError:
        raise ValueError(
            f"Unknown energy mode {mode!r}; expected one of {sorted(ENERGY_PROFILES)}"
        ) from None


def average_bpm(tracks: Sequence[Track]) -> float:
    """Mean BPM of a playlist, counting missing BPM as 0."""
    if not tracks:
        return 0.0
    return float(np.mean([t.bpm or 0.0 for t in tracks]))


def energy_curve_target(tracks: Sequence[Track], profile: EnergyProfile) -> float:
    """
    BPM the next track should sit near for the set to keep building.

    target = mean BPM so far + bpm_increase * (len / 5)
    """
    return average_bpm(tracks) + profile.bpm_increase * (len(tracks) / 5)


def energy_flow_score(from_bpm: Optional[float], to_bpm: Optional[float]) -> float:
    """
    Score a single transition's energy direction (0.2-1.0).

    Slight rises (up to +8 BPM) are best, small drops (down to -4 BPM) are
    acceptable, anything larger decays with the size of the jump.

    Args:
        from_bpm: Outgoing track BPM
        to_bpm: Incoming track BPM

    Returns:
        Energy flow score, or neutral 0.5 if either BPM is missing
    """
    if not from_bpm or not to_bpm:
        return 0.5

    bpm_diff = to_bpm - from_bpm

    if 0 < bpm_diff <= 8:
        return 0.8 + 0.2 * (1 - bpm_diff / 8)

    if -4 <= bpm_diff < 0:
        return 0.6 + 0.2 * (1 - abs(bpm_diff) / 4)

    return max(0.2, 1 - abs(bpm_diff) / 16)
