"""
Track Sequencer: greedy, locally randomized walk that builds a playlist.

- Starts from the seed track, never backtracks
- Each step scores every unused track against the last one played
- Picks among the top 3 by weighted random choice (weight = max(0.1, score))
- Stops at the target length (DONE) or when the pool runs dry (STUCK)

Randomness comes from an injected numpy Generator so a seeded run can be
replayed exactly.
"""

import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..models import Track, PlaylistTrack
from .energy import get_energy_profile
from .graph import TransitionGraph
from .options import PlaylistOptions
from .scorer import score_candidate

logger = logging.getLogger(__name__)

TOP_CANDIDATES = 3
MIN_SELECTION_WEIGHT = 0.1


class SequencerState(Enum):
    INIT = "init"
    SELECT_NEXT = "select_next"
    DONE = "done"
    STUCK = "stuck"


def weighted_choice(
    scored: Sequence[Tuple[Track, float]],
    rng: np.random.Generator,
) -> Track:
    """
    Pick one track, each weighted by max(0.1, score).

    The floor keeps every offered candidate selectable even with a
    non-positive score.

    Args:
        scored: (track, score) pairs, best first
        rng: Random source

    Returns:
        The chosen track
    """
    weights = [max(MIN_SELECTION_WEIGHT, score) for _, score in scored]
    threshold = rng.random() * sum(weights)

    accumulator = 0.0
    for (track, _), weight in zip(scored, weights):
        accumulator += weight
        if threshold <= accumulator:
            return track

    return scored[0][0]


class GreedySequencer:
    """
    Greedy track sequencer.

    Holds the state of a single generation run; build a new one per call.
    """

    def __init__(
        self,
        graph: TransitionGraph,
        options: PlaylistOptions,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Args:
            graph: Transition graph for this run
            options: Generation options
            rng: Random source (fresh unseeded Generator if None)
        """
        self.graph = graph
        self.options = options
        self.profile = get_energy_profile(options.energy_mode)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.state = SequencerState.INIT

    def rank_candidates(
        self,
        current: Track,
        candidates: Sequence[Track],
        playlist: Sequence[Track],
    ) -> List[Tuple[Track, float]]:
        """
        Score and rank candidates, best first.

        Ties keep their catalog order.

        Returns:
            At most TOP_CANDIDATES (track, score) pairs
        """
        scored = [
            (candidate, score_candidate(current, candidate, playlist, self.profile, self.options, self.graph))
            for candidate in candidates
        ]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[:TOP_CANDIDATES]

    def choose_next(
        self,
        current: Track,
        candidates: Sequence[Track],
        playlist: Sequence[Track],
    ) -> Optional[Track]:
        """
        Choose the track to follow `current`.

        Args:
            current: Last track in the playlist
            candidates: Unused tracks
            playlist: Playlist built so far

        Returns:
            Chosen track, or None if there are no candidates
        """
        top = self.rank_candidates(current, candidates, playlist)
        if not top:
            return None

        chosen = weighted_choice(top, self.rng)
        logger.debug(
            f"Chose {chosen.id} from top {len(top)}: "
            + ", ".join(f"{t.id}={s:.2f}" for t, s in top)
        )
        return chosen

    def build_playlist(self, seed: Track, library: Sequence[Track]) -> List[PlaylistTrack]:
        """
        Build a playlist starting from the seed track.

        Args:
            seed: First track of the set
            library: Full catalog (the seed may or may not be included)

        Returns:
            PlaylistTrack list, seed at position 0, at most target_length long
        """
        playlist: List[PlaylistTrack] = [PlaylistTrack.from_track(seed, 0)]
        used = {seed.id}
        pool = []
        for track in library:
            if track.id not in used:
                pool.append(track)
                used.add(track.id)

        logger.info(
            f"Building playlist from seed {seed.id} "
            f"(target: {self.options.target_length} tracks, mode: {self.profile.name}, "
            f"pool: {len(pool)})"
        )

        self.state = SequencerState.SELECT_NEXT
        while len(playlist) < self.options.target_length:
            next_track = self.choose_next(playlist[-1], pool, playlist)
            if next_track is None:
                self.state = SequencerState.STUCK
                logger.warning(
                    f"No candidates left after {len(playlist)} tracks; "
                    f"returning shorter playlist"
                )
                break

            playlist.append(PlaylistTrack.from_track(next_track, len(playlist)))
            pool = [t for t in pool if t.id != next_track.id]
        else:
            self.state = SequencerState.DONE

        logger.info(f"✅ Playlist built: {len(playlist)} tracks ({self.state.value})")
        return playlist


def sequence_playlist(
    seed: Track,
    library: Sequence[Track],
    graph: TransitionGraph,
    options: PlaylistOptions,
    rng: Optional[np.random.Generator] = None,
) -> List[PlaylistTrack]:
    """
    Run one greedy walk from `seed` over `library`.

    Returns:
        Ordered playlist (see GreedySequencer.build_playlist)
    """
    return GreedySequencer(graph, options, rng=rng).build_playlist(seed, library)
