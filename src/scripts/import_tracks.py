#!/usr/bin/env python3
"""
Import Tracks Script

Usage: python src/scripts/import_tracks.py tracks.csv

Reads "artist,title" lines from a text file and resolves them against the
track database, five lookups at a time. Unknown tracks are added with empty
BPM and key.
"""

import csv
import sys
import logging
from pathlib import Path

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from mixgraph.analyze.lookup import process_batch
from mixgraph.config import Config
from mixgraph.db import Database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def read_pairs(path: Path):
    with open(path, newline="", encoding="utf-8") as f:
        for row in csv.reader(f):
            if len(row) >= 2 and row[0].strip() and not row[0].startswith("#"):
                yield row[0].strip(), row[1].strip()


def main():
    """Main import entrypoint."""
    try:
        if len(sys.argv) < 2:
            logger.error("Usage: import_tracks.py <tracks.csv>")
            return 1

        config = Config.load()
        pairs = list(read_pairs(Path(sys.argv[1])))
        logger.info(f"📥 Importing {len(pairs)} tracks...")

        with Database(config.get("database", "path")) as db:
            result = process_batch(pairs, db, chunk_size=config.get("lookup", "chunk_size", 5))
            stats = db.get_stats()

        new_tracks = sum(1 for t in result.processed if t.source == "new")
        logger.info("=" * 60)
        logger.info(f"  Resolved:   {len(result.processed)} ({new_tracks} new)")
        logger.info(f"  Failed:     {len(result.failed)}")
        logger.info(f"  Total DB:   {stats['total_tracks']}")
        logger.info("=" * 60)
        for failure in result.failed:
            logger.warning(f"  {failure.artist} - {failure.title}: {failure.error}")

        return 0

    except KeyboardInterrupt:
        logger.warning("Import interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Import failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
