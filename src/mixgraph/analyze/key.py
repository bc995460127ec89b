"""
Key normalization and harmonic compatibility on the Camelot wheel.

All keys are folded onto the minor ("A") side of the wheel before any
distance is computed, so relative major/minor keys compare as equal.
Unrecognized key names are returned cleaned but otherwise unchanged; they
score a neutral 0.5 against anything they are not identical to.
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

CAMELOT_PATTERN = re.compile(r"^([1-9]|1[0-2])([AB])$", re.IGNORECASE)

# Standard key names to Camelot notation.
# Majors land on the B side, minors on the A side.
STANDARD_TO_CAMELOT = {
    # Major keys
    "B": "1B",
    "Gb": "2B",
    "Db": "3B",
    "Ab": "4B",
    "Eb": "5B",
    "Bb": "6B",
    "F": "7B",
    "C": "8B",
    "G": "9B",
    "D": "10B",
    "A": "11B",
    "E": "12B",
    # Minor keys
    "Abm": "1A",
    "Ebm": "2A",
    "Bbm": "3A",
    "Fm": "4A",
    "Cm": "5A",
    "Gm": "6A",
    "Dm": "7A",
    "Am": "8A",
    "Em": "9A",
    "Bm": "10A",
    "F#m": "11A",
    "C#m": "12A",
    # Sharp spellings
    "F#": "2B",
    "C#": "3B",
    "G#": "4B",
    "D#": "5B",
    "A#": "6B",
    "G#m": "1A",
    "D#m": "2A",
    "A#m": "3A",
}

# Fixed B -> A fold used before any distance computation
CAMELOT_B_TO_A = {
    "1B": "4A",
    "2B": "5A",
    "3B": "6A",
    "4B": "7A",
    "5B": "8A",
    "6B": "9A",
    "7B": "10A",
    "8B": "11A",
    "9B": "12A",
    "10B": "1A",
    "11B": "2A",
    "12B": "3A",
}

# Score by distance on the 12-step wheel (circle of fifths / relative keys).
# Not monotonic: three steps scores above two.
DISTANCE_SCORES = {
    0: 1.0,
    1: 0.8,
    2: 0.6,
    3: 0.7,
    5: 0.8,
    7: 0.8,
}
DEFAULT_DISTANCE_SCORE = 0.4
NEUTRAL_SCORE = 0.5


_MODE_WORDS = (("major", ""), ("minor", "m"), ("maj", ""), ("min", "m"))


def _clean(raw: str) -> str:
    cleaned = re.sub(r"\s+", "", raw)
    # Repeat until stable: dropping "maj" can expose a new "major"
    while True:
        previous = cleaned
        for pattern, replacement in _MODE_WORDS:
            cleaned = re.sub(pattern, replacement, cleaned, flags=re.IGNORECASE)
        if cleaned == previous:
            return cleaned


def is_camelot(key: Optional[str]) -> bool:
    """True if `key` is syntactically a Camelot key (e.g. "8A", "12b")."""
    return bool(key) and CAMELOT_PATTERN.match(key) is not None


def normalize_key(raw: Optional[str]) -> str:
    """
    Normalize a key name to Camelot "A" notation.

    Accepts Camelot keys ("8B", "11a") and standard names ("Am", "F# minor",
    "E♭ maj"). Unknown names come back cleaned and upper-cased.

    Args:
        raw: Key as stored or tagged (may be None)

    Returns:
        Normalized key, or "" for empty input
    """
    if not raw:
        return ""

    cleaned = _clean(raw)

    if CAMELOT_PATTERN.match(cleaned):
        upper = cleaned.upper()
        if upper.endswith("A"):
            return upper
        return CAMELOT_B_TO_A.get(upper, upper)

    with_sharps = cleaned.replace("bb", "b").replace("♭", "b").replace("♯", "#")
    # Note letter is case-insensitive ("am" == "Am")
    camelot = STANDARD_TO_CAMELOT.get(with_sharps[:1].upper() + with_sharps[1:])
    if camelot is None:
        logger.debug(f"Unrecognized key {raw!r}; keeping {cleaned.upper()!r}")
        return cleaned.upper()

    return CAMELOT_B_TO_A.get(camelot, camelot)


def camelot_position(key: Optional[str]) -> Optional[int]:
    """
    Position of a key on the 24-slot wheel (0-23).

    Minor (A) keys take even slots, major (B) keys odd slots.

    Returns:
        Slot index, or None if the key cannot be mapped
    """
    normalized = normalize_key(key)
    match = CAMELOT_PATTERN.match(normalized)
    if not match:
        return None
    number, letter = int(match.group(1)), match.group(2).upper()
    return (number - 1) * 2 + (0 if letter == "A" else 1)


def distance_score(distance: int) -> float:
    """Compatibility score for a wheel distance; total over all integers."""
    return DISTANCE_SCORES.get(distance, DEFAULT_DISTANCE_SCORE)


def compatibility(key1: Optional[str], key2: Optional[str]) -> float:
    """
    Harmonic compatibility of two keys in [0.0, 1.0].

    Args:
        key1: First key (any notation)
        key2: Second key (any notation)

    Returns:
        1.0 for identical keys, a wheel-distance score otherwise,
        or 0.5 when either key cannot be placed on the wheel
    """
    normalized1 = normalize_key(key1)
    normalized2 = normalize_key(key2)

    if normalized1 == normalized2:
        return 1.0

    pos1 = camelot_position(normalized1)
    pos2 = camelot_position(normalized2)
    if pos1 is None or pos2 is None:
        return NEUTRAL_SCORE

    # Compare Camelot numbers on the 12-step base circle
    num1, num2 = pos1 // 2, pos2 // 2
    delta = abs(num1 - num2)
    distance = min(delta, 12 - delta)

    return distance_score(distance)
