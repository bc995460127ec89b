"""
Transition insights: explain each transition and suggest alternatives.

Each adjacent pair gets a confidence (mean of its reason scores) and a list
of typed reasons. These scores answer "how good is this transition" and are
kept separate from the selection scores in `scorer`; the harmonic reason,
for instance, uses compatibility on its native [0, 1] scale.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

from ..analyze.key import compatibility
from ..models import Track, PlaylistTrack
from ..stores import TrackStore, TransitionStore
from .energy import energy_flow_score

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 3
ALTERNATIVE_REASON_THRESHOLD = 0.6
BPM_SCALE = 16.0
HISTORY_SATURATION = 10.0


class ReasonKind(Enum):
    BPM = "bpm"
    KEY = "key"
    HISTORY = "history"
    ENERGY = "energy"


@dataclass(frozen=True)
class Reason:
    kind: ReasonKind
    score: float
    description: str


@dataclass(frozen=True)
class TransitionAnalysis:
    confidence: float
    reasons: List[Reason]


@dataclass(frozen=True)
class Alternative:
    """A track that could replace the incoming track of a transition."""

    track: Track
    score: float
    reasons: List[str]


@dataclass(frozen=True)
class TransitionInsight:
    from_track: PlaylistTrack
    to_track: PlaylistTrack
    confidence: float
    reasons: List[Reason]
    alternatives: List[Alternative] = field(default_factory=list)


def bpm_reason(current: Track, following: Track) -> Reason:
    bpm_diff = abs(current.bpm - following.bpm)
    return Reason(
        kind=ReasonKind.BPM,
        score=max(0.0, 1 - bpm_diff / BPM_SCALE),
        description=f"BPM change of {bpm_diff:.1f} BPM",
    )


def key_reason(current: Track, following: Track) -> Reason:
    return Reason(
        kind=ReasonKind.KEY,
        score=compatibility(current.key, following.key),
        description=f"Key change from {current.key} to {following.key}",
    )


def history_reason(frequency: int) -> Reason:
    score = min(1.0, frequency / HISTORY_SATURATION)
    if score > 0.7:
        description = "Frequently used transition"
    elif score > 0.3:
        description = "Sometimes used transition"
    else:
        description = "New transition combination"
    return Reason(kind=ReasonKind.HISTORY, score=score, description=description)


def energy_reason(current: Track, following: Track) -> Reason:
    score = energy_flow_score(current.bpm, following.bpm)
    if score > 0.7:
        verdict = "optimal"
    elif score > 0.4:
        verdict = "acceptable"
    else:
        verdict = "needs improvement"
    return Reason(kind=ReasonKind.ENERGY, score=score, description=f"Energy progression {verdict}")


def analyze_transition(
    current: Track,
    following: Track,
    transition_store: TransitionStore,
) -> TransitionAnalysis:
    """
    Explain the transition current -> following.

    BPM and key reasons are only emitted when both tracks carry the data;
    history and energy reasons are always present.

    Args:
        current: Outgoing track
        following: Incoming track
        transition_store: Source of historical frequencies

    Returns:
        TransitionAnalysis whose confidence is the mean reason score
    """
    reasons: List[Reason] = []

    if current.bpm and following.bpm:
        reasons.append(bpm_reason(current, following))

    if current.key and following.key:
        reasons.append(key_reason(current, following))

    reasons.append(history_reason(transition_store.get_frequency(current.id, following.id)))
    reasons.append(energy_reason(current, following))

    confidence = sum(r.score for r in reasons) / len(reasons)
    return TransitionAnalysis(confidence=confidence, reasons=reasons)


def find_alternatives(
    from_track: Track,
    playlist: Sequence[Track],
    track_store: TrackStore,
    transition_store: TransitionStore,
) -> List[Alternative]:
    """
    Suggest replacements for the track after `from_track`.

    Looks at up to three catalog tracks not already in the playlist. Lookup
    failures are logged and produce no alternatives.

    Returns:
        Alternatives sorted by confidence, best first
    """
    in_playlist = {t.id for t in playlist}
    try:
        candidates = [t for t in track_store.list_tracks() if t.id not in in_playlist]
        candidates = candidates[:MAX_ALTERNATIVES]

        alternatives = []
        for track in candidates:
            analysis = analyze_transition(from_track, track, transition_store)
            alternatives.append(
                Alternative(
                    track=track,
                    score=analysis.confidence,
                    reasons=[
                        r.description
                        for r in analysis.reasons
                        if r.score > ALTERNATIVE_REASON_THRESHOLD
                    ],
                )
            )
    except Exception as e:
        logger.warning(f"Alternative lookup failed for {from_track.id}: {e}")
        return []

    alternatives.sort(key=lambda a: a.score, reverse=True)
    return alternatives


def get_playlist_insights(
    playlist: Sequence[PlaylistTrack],
    track_store: TrackStore,
    transition_store: TransitionStore,
) -> List[TransitionInsight]:
    """
    Build one TransitionInsight per adjacent pair of the playlist.

    Args:
        playlist: Playlist in playback order
        track_store: Catalog for alternative suggestions
        transition_store: Historical frequencies

    Returns:
        len(playlist) - 1 insights (empty for playlists shorter than 2)
    """
    insights = []

    for current, following in zip(playlist, playlist[1:]):
        analysis = analyze_transition(current, following, transition_store)
        alternatives = find_alternatives(current, playlist, track_store, transition_store)

        insights.append(
            TransitionInsight(
                from_track=current,
                to_track=following,
                confidence=analysis.confidence,
                reasons=analysis.reasons,
                alternatives=alternatives,
            )
        )

    logger.info(f"Generated {len(insights)} transition insights")
    return insights
