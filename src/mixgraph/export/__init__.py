"""
Export Module: Serialize playlists for DJ software.

- rekordbox : pseudo-Rekordbox XML collection
- virtualdj : CSV (Title, Artist, BPM, Key)
- m3u       : extended M3U with #EXTINF / #EXTALB lines
"""

__all__ = ["formats"]
