"""
Set Generation Module: Build playlists and explain their transitions.

- Greedy, locally randomized walk (no backtracking, no global optimizer)
- Transition graph rebuilt for every generation call
- Optional style/mood reordering and per-transition insights
"""

__all__ = ["graph", "energy", "options", "scorer", "selector", "playlist", "styling", "insights"]
