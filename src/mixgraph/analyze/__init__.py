"""
Track Analysis Module: Key notation and track metadata lookup.

- Camelot key normalization and pairwise harmonic compatibility
- Batch artist/title resolution against the track store (5 lookups at a time)
"""

__all__ = ["key", "lookup"]
