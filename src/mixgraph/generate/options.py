"""
Caller-supplied generation options.

Bounds mirror the [playlist] and [ai] config sections; invalid values are
rejected when the options object is built.
"""

from dataclasses import dataclass
from .energy import ENERGY_PROFILES

TARGET_LENGTH_BOUNDS = (5, 20)
MAX_BPM_CHANGE_BOUNDS = (2, 16)

STYLES = ("balanced", "experimental", "safe")
MOODS = ("energetic", "chill", "progressive")
TRANSITION_COMPLEXITIES = ("simple", "moderate", "complex")


def _check_range(name: str, value: float, bounds: tuple) -> None:
    min_val, max_val = bounds
    if not (min_val <= value <= max_val):
        raise ValueError(f"{name}={value} out of bounds [{min_val}, {max_val}]")


def _check_type(name: str, value, types: tuple) -> None:
    # bool is an int subclass but never a valid count or BPM
    if isinstance(value, bool) or not isinstance(value, types):
        raise ValueError(f"{name}={value!r} must be {' or '.join(t.__name__ for t in types)}")


def _check_choice(name: str, value: str, choices) -> None:
    if value not in choices:
        raise ValueError(f"{name}={value!r} must be one of {list(choices)}")


@dataclass(frozen=True)
class PlaylistOptions:
    """Options for the base greedy playlist generator."""

    target_length: int = 10
    max_bpm_change: float = 8
    prefer_harmonic_mixing: bool = True
    energy_mode: str = "smooth"

    def __post_init__(self):
        _check_type("target_length", self.target_length, (int,))
        _check_type("max_bpm_change", self.max_bpm_change, (int, float))
        _check_range("target_length", self.target_length, TARGET_LENGTH_BOUNDS)
        _check_range("max_bpm_change", self.max_bpm_change, MAX_BPM_CHANGE_BOUNDS)
        _check_choice("energy_mode", self.energy_mode, ENERGY_PROFILES)


@dataclass(frozen=True)
class AIPlaylistOptions(PlaylistOptions):
    """Base options plus the style/mood/complexity post-processing knobs."""

    style: str = "balanced"
    mood: str = "progressive"
    transition_complexity: str = "moderate"

    def __post_init__(self):
        super().__post_init__()
        _check_choice("style", self.style, STYLES)
        _check_choice("mood", self.mood, MOODS)
        _check_choice("transition_complexity", self.transition_complexity, TRANSITION_COMPLEXITIES)

    def base_options(self) -> PlaylistOptions:
        """The subset consumed by the base generator."""
        return PlaylistOptions(
            target_length=self.target_length,
            max_bpm_change=self.max_bpm_change,
            prefer_harmonic_mixing=self.prefer_harmonic_mixing,
            energy_mode=self.energy_mode,
        )
