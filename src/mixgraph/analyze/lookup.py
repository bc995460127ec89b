"""
Batch track lookup: resolve artist/title pairs against the track store.

Lookups run five at a time. A chunk must fully settle (every lookup
succeeded or failed) before the next chunk starts, and one failure never
cancels its siblings.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..stores import TrackStore
from .key import normalize_key

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5


@dataclass(frozen=True)
class TrackInfo:
    artist: str
    title: str
    bpm: Optional[float]
    key: Optional[str]
    source: str  # "database" or "new"


@dataclass(frozen=True)
class FailedLookup:
    artist: str
    title: str
    error: str


@dataclass
class BatchResult:
    processed: List[TrackInfo] = field(default_factory=list)
    failed: List[FailedLookup] = field(default_factory=list)


def find_track_info(track_store: TrackStore, artist: str, title: str) -> Optional[TrackInfo]:
    """
    Resolve one artist/title pair.

    Known tracks come back with their key normalized. Unknown tracks are
    inserted with empty BPM and key so they can be analyzed later.

    Returns:
        TrackInfo, or None if the new track could not be inserted
    """
    existing = track_store.find_track(artist, title)
    if existing is not None:
        return TrackInfo(
            artist=existing.artist,
            title=existing.title,
            bpm=existing.bpm,
            key=normalize_key(existing.key) if existing.key else None,
            source="database",
        )

    try:
        created = track_store.add_track(title=title, artist=artist)
    except Exception as e:
        logger.error(f"Error inserting track {artist} - {title}: {e}")
        return None

    return TrackInfo(
        artist=created.artist,
        title=created.title,
        bpm=created.bpm,
        key=created.key,
        source="new",
    )


def _chunks(items: List[Tuple[str, str]], size: int) -> Iterable[List[Tuple[str, str]]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def process_batch(
    pairs: Iterable[Tuple[str, str]],
    track_store: TrackStore,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> BatchResult:
    """
    Resolve many (artist, title) pairs with bounded concurrency.

    Args:
        pairs: (artist, title) tuples
        track_store: Store to search and insert into
        chunk_size: Lookups in flight at once

    Returns:
        BatchResult with processed tracks and per-item failures
    """
    items = list(pairs)
    result = BatchResult()

    with ThreadPoolExecutor(max_workers=chunk_size) as executor:
        for chunk_index, chunk in enumerate(_chunks(items, chunk_size)):
            futures = {
                executor.submit(find_track_info, track_store, artist, title): (artist, title)
                for artist, title in chunk
            }
            wait(futures)

            # Record in input order so results are reproducible
            for future, (artist, title) in futures.items():
                error = future.exception()
                if error is not None:
                    result.failed.append(FailedLookup(artist, title, str(error) or "Unknown error"))
                elif future.result() is None:
                    result.failed.append(FailedLookup(artist, title, "Track information not found"))
                else:
                    result.processed.append(future.result())

            logger.debug(f"Lookup chunk {chunk_index + 1} settled ({len(chunk)} items)")

    logger.info(
        f"✅ Batch lookup finished: {len(result.processed)} processed, "
        f"{len(result.failed)} failed"
    )
    return result
