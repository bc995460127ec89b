"""
Unit tests for track lookup and the chunked batch processor.
"""

import threading
import time

import pytest
from unittest.mock import Mock
from mixgraph.analyze.lookup import find_track_info, process_batch
from mixgraph.models import Track
from mixgraph.stores import InMemoryStore, StoreError


@pytest.fixture
def store():
    return InMemoryStore(tracks=[
        Track("t1", "Strobe", "deadmau5", bpm=128.0, key="Am"),
        Track("t2", "Opus", "Eric Prydz", bpm=126.0, key=None),
    ])


class TestFindTrackInfo:
    """Test single lookups."""

    def test_known_track(self, store):
        info = find_track_info(store, "deadmau5", "Strobe")
        assert info.source == "database"
        assert info.bpm == 128.0
        assert info.key == "8A"

    def test_case_insensitive(self, store):
        info = find_track_info(store, "ERIC PRYDZ", "opus")
        assert info.source == "database"
        assert info.key is None

    def test_unknown_track_is_inserted(self, store):
        info = find_track_info(store, "Bicep", "Glue")

        assert info.source == "new"
        assert info.bpm is None
        assert info.key is None
        assert store.find_track("Bicep", "Glue") is not None

    def test_insert_failure(self):
        broken = Mock()
        broken.find_track = Mock(return_value=None)
        broken.add_track = Mock(side_effect=StoreError("read-only"))

        assert find_track_info(broken, "Bicep", "Glue") is None

    def test_search_failure_propagates(self):
        broken = Mock()
        broken.find_track = Mock(side_effect=StoreError("timeout"))

        with pytest.raises(StoreError):
            find_track_info(broken, "Bicep", "Glue")


class TestProcessBatch:
    """Test chunked batch lookups."""

    def test_mixed_results(self, store):
        result = process_batch(
            [("deadmau5", "Strobe"), ("Bicep", "Glue"), ("Eric Prydz", "Opus")],
            store,
        )
        assert [info.source for info in result.processed] == ["database", "new", "database"]
        assert result.failed == []

    def test_failures_recorded(self):
        def find_track(artist, title):
            if artist == "bad":
                raise StoreError("lookup exploded")
            return None

        broken = Mock()
        broken.find_track = Mock(side_effect=find_track)
        broken.add_track = Mock(side_effect=StoreError("read-only"))

        result = process_batch([("bad", "one"), ("good", "two")], broken)

        assert result.processed == []
        errors = {f.artist: f.error for f in result.failed}
        assert errors["bad"] == "lookup exploded"
        assert errors["good"] == "Track information not found"

    def test_one_failure_does_not_cancel_siblings(self, store):
        real_find = store.find_track

        def find_track(artist, title):
            if title == "boom":
                raise StoreError("boom")
            return real_find(artist, title)

        store.find_track = find_track
        pairs = [("deadmau5", "Strobe"), ("x", "boom"), ("Eric Prydz", "Opus")]
        result = process_batch(pairs, store)

        assert len(result.processed) == 2
        assert len(result.failed) == 1

    def test_concurrency_bounded_by_chunk(self, store):
        """No more than five lookups are in flight, and chunks never overlap."""
        lock = threading.Lock()
        in_flight = 0
        peak = 0
        finished = []
        real_find = store.find_track

        def find_track(artist, title):
            nonlocal in_flight, peak
            with lock:
                in_flight += 1
                peak = max(peak, in_flight)
            time.sleep(0.02)
            with lock:
                in_flight -= 1
                finished.append(title)
            return real_find(artist, title)

        store.find_track = find_track
        pairs = [("artist", f"song-{i}") for i in range(12)]
        result = process_batch(pairs, store)

        assert peak <= 5
        assert len(result.processed) == 12
        # The first chunk fully settles before any of the second starts
        assert set(finished[:5]) == {f"song-{i}" for i in range(5)}

    def test_empty(self, store):
        result = process_batch([], store)
        assert result.processed == []
        assert result.failed == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
