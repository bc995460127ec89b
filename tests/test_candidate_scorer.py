"""
Unit tests for candidate scoring and energy profiles.

Tests each additive factor and the documented ranking example.
"""

import math

import pytest
from mixgraph.generate.energy import (
    ENERGY_PROFILES,
    average_bpm,
    energy_curve_target,
    energy_flow_score,
    get_energy_profile,
)
from mixgraph.generate.graph import TransitionGraph
from mixgraph.generate.options import PlaylistOptions
from mixgraph.generate.scorer import score_breakdown, score_candidate
from mixgraph.models import Track, TransitionEdge


@pytest.fixture
def options():
    return PlaylistOptions()


@pytest.fixture
def smooth():
    return get_energy_profile("smooth")


@pytest.fixture
def track_a():
    return Track("A", "Opener", "DJ One", bpm=120.0, key="8A")


@pytest.fixture
def graph():
    return TransitionGraph.from_edges([TransitionEdge("A", "B", 5)])


class TestEnergyProfiles:
    """Test energy profile presets."""

    def test_presets(self):
        assert ENERGY_PROFILES["smooth"].bpm_increase == 2
        assert ENERGY_PROFILES["smooth"].bpm_variance == 4
        assert ENERGY_PROFILES["smooth"].weight == 1.5
        assert ENERGY_PROFILES["dynamic"].bpm_variance == 8
        assert ENERGY_PROFILES["high"].weight == 2.0

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            get_energy_profile("turbo")

    def test_average_bpm_counts_missing_as_zero(self):
        tracks = [Track("1", "t", "a", bpm=120.0), Track("2", "t", "a", bpm=None)]
        assert average_bpm(tracks) == 60.0

    def test_average_bpm_empty(self):
        assert average_bpm([]) == 0.0

    def test_curve_target(self, smooth):
        tracks = [Track(str(i), "t", "a", bpm=b) for i, b in enumerate([120.0, 122.0, 124.0])]
        # 122 + 2 * (3 / 5)
        assert energy_curve_target(tracks, smooth) == pytest.approx(123.2)


class TestEnergyFlow:
    """Test the single-transition energy score."""

    def test_slight_rise(self):
        assert energy_flow_score(120, 124) == pytest.approx(0.9)
        assert energy_flow_score(120, 128) == pytest.approx(0.8)

    def test_small_drop(self):
        assert energy_flow_score(120, 118) == pytest.approx(0.7)
        assert energy_flow_score(120, 116) == pytest.approx(0.6)

    def test_large_change(self):
        assert energy_flow_score(120, 112) == pytest.approx(0.5)
        assert energy_flow_score(120, 140) == pytest.approx(0.2)

    def test_no_change(self):
        assert energy_flow_score(120, 120) == 1.0

    def test_missing_bpm_neutral(self):
        assert energy_flow_score(None, 120) == 0.5
        assert energy_flow_score(120, None) == 0.5


class TestScoringFactors:
    """Test individual scoring factors."""

    def test_history_factor(self, track_a, smooth, options, graph):
        candidate = Track("B", "Next", "DJ Two")
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, options, graph)
        assert breakdown.history == pytest.approx(math.log(6) * 3)

    def test_no_history(self, track_a, smooth, options, graph):
        candidate = Track("Z", "Fresh", "DJ Two")
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, options, graph)
        assert breakdown.history == 0.0

    def test_bpm_progression_ideal_rise(self, track_a, smooth, options, graph):
        """A +2 BPM rise under smooth earns the full weight."""
        candidate = Track("Z", "t", "a", bpm=122.0)
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, options, graph)
        assert breakdown.bpm_progression == pytest.approx(1.5)
        assert breakdown.bpm_penalty == 0.0

    def test_bpm_progression_outside_variance(self, track_a, smooth, options, graph):
        candidate = Track("Z", "t", "a", bpm=126.0)
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, options, graph)
        assert breakdown.bpm_progression == 0.0

    def test_bpm_progression_can_be_negative(self, track_a, smooth, options, graph):
        """A -4 drop is within variance but far from the ideal +2."""
        candidate = Track("Z", "t", "a", bpm=116.0)
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, options, graph)
        assert breakdown.bpm_progression == pytest.approx(1.5 * (1 - 6 / 4))

    def test_bpm_jump_penalty(self, smooth, options, graph):
        """Jumps beyond max_bpm_change cost 2 points but stay scoreable."""
        current = Track("X", "t", "a", bpm=120.0)
        candidate = Track("Y", "t", "a", bpm=130.0)
        breakdown = score_breakdown(current, candidate, [current], smooth, options, graph)
        assert breakdown.bpm_penalty == 2.0
        assert breakdown.total == pytest.approx(-2.0)

    def test_penalty_respects_option(self, smooth, graph):
        current = Track("X", "t", "a", bpm=120.0)
        candidate = Track("Y", "t", "a", bpm=130.0)
        loose = PlaylistOptions(max_bpm_change=12)
        breakdown = score_breakdown(current, candidate, [current], smooth, loose, graph)
        assert breakdown.bpm_penalty == 0.0

    def test_missing_bpm_skips_bpm_factors(self, track_a, smooth, options, graph):
        candidate = Track("Z", "t", "a", bpm=None, key="8A")
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, options, graph)
        assert breakdown.bpm_progression == 0.0
        assert breakdown.bpm_penalty == 0.0

    def test_harmonic_factor(self, track_a, smooth, options, graph):
        candidate = Track("Z", "t", "a", key="9A")
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, options, graph)
        assert breakdown.harmonic == pytest.approx(1.6)

    def test_harmonic_disabled(self, track_a, smooth, graph):
        candidate = Track("Z", "t", "a", key="8A")
        no_harmonic = PlaylistOptions(prefer_harmonic_mixing=False)
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, no_harmonic, graph)
        assert breakdown.harmonic == 0.0

    def test_energy_curve_needs_three_tracks(self, smooth, options, graph):
        played = [Track(str(i), "t", "a", bpm=b) for i, b in enumerate([120.0, 122.0])]
        candidate = Track("Z", "t", "a", bpm=124.0)
        breakdown = score_breakdown(played[-1], candidate, played, smooth, options, graph)
        assert breakdown.energy_curve == 0.0

    def test_energy_curve(self, smooth, options, graph):
        played = [Track(str(i), "t", "a", bpm=b) for i, b in enumerate([120.0, 122.0, 124.0])]
        candidate = Track("Z", "t", "a", bpm=124.0)
        breakdown = score_breakdown(played[-1], candidate, played, smooth, options, graph)
        # target 123.2, distance 0.8, scale 8
        assert breakdown.energy_curve == pytest.approx(0.9)

    def test_total_matches_score_candidate(self, track_a, smooth, options, graph):
        candidate = Track("B", "t", "a", bpm=124.0, key="8A")
        breakdown = score_breakdown(track_a, candidate, [track_a], smooth, options, graph)
        assert score_candidate(track_a, candidate, [track_a], smooth, options, graph) == breakdown.total


class TestRankingExample:
    """History and harmony together rank B above C."""

    def test_b_ranks_above_c(self, track_a, smooth, options, graph):
        track_b = Track("B", "Favourite", "DJ Two", bpm=124.0, key="8A")
        track_c = Track("C", "Stranger", "DJ Three", bpm=124.0, key="2A")

        score_b = score_candidate(track_a, track_b, [track_a], smooth, options, graph)
        score_c = score_candidate(track_a, track_c, [track_a], smooth, options, graph)

        assert score_b > score_c
        # history 5.375 + bpm 0.75 + harmonic 2.0
        assert score_b == pytest.approx(math.log(6) * 3 + 0.75 + 2.0)
        # bpm 0.75 + harmonic 0.4 * 2
        assert score_c == pytest.approx(0.75 + 0.8)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
