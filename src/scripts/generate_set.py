#!/usr/bin/env python3
"""
Generate DJ Set Script

Usage: python src/scripts/generate_set.py [SEED_ID] [--ai] [--insights]

- Reads seed, options and database path from configs/mixgraph.toml
- Builds the set (optionally styled with --ai)
- Writes the export in the configured format
- Optionally logs per-transition insights
"""

import argparse
import sys
import logging
from pathlib import Path
from datetime import datetime, timezone

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from mixgraph.config import Config
from mixgraph.db import Database
from mixgraph.export.formats import write_export
from mixgraph.generate.insights import get_playlist_insights
from mixgraph.generate.playlist import GenerationError, generate_playlist, generate_ai_playlist

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a DJ set from a seed track")
    parser.add_argument("seed", nargs="?", help="Seed track ID (default: [playlist] seed_track_id)")
    parser.add_argument("--config", help="Path to mixgraph.toml")
    parser.add_argument("--ai", action="store_true", help="Apply style/mood/complexity from [ai]")
    parser.add_argument("--format", help="Export format (default: [export] format)")
    parser.add_argument("--insights", action="store_true", help="Log transition insights")
    return parser.parse_args(argv)


def main(argv=None):
    """Main generation entrypoint."""
    args = parse_args(argv)
    try:
        logger.info("🎵 Starting playlist generation...")

        config = Config.load(args.config)
        logger.info(f"Config loaded: {config}")

        seed_id = args.seed or config.get("playlist", "seed_track_id")
        if not seed_id:
            logger.error("No seed track given (argument or [playlist] seed_track_id)")
            return 1

        export_format = args.format or config.get("export", "format", "m3u")

        with Database(config.get("database", "path")) as db:
            if args.ai:
                playlist = generate_ai_playlist(seed_id, db, db, options=config.ai_options())
            else:
                playlist = generate_playlist(seed_id, db, db, options=config.playlist_options())

            for track in playlist:
                bpm = f"{track.bpm:.0f}" if track.bpm else "?"
                logger.info(f"  {track.position + 1:2d}. {track.artist} - {track.title} ({bpm} BPM, {track.key or '?'})")

            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
            output_dir = Path(config.get("export", "output_dir", "data/playlists"))
            path = write_export(playlist, export_format, str(output_dir / f"set-{timestamp}"))
            logger.info(f"✅ Set exported: {path}")

            if args.insights:
                for insight in get_playlist_insights(playlist, db, db):
                    logger.info(
                        f"  {insight.from_track.title} → {insight.to_track.title}: "
                        f"{insight.confidence:.0%} "
                        f"({'; '.join(r.description for r in insight.reasons)})"
                    )
                    for alt in insight.alternatives:
                        logger.info(f"      alt: {alt.track.title} ({alt.score:.0%})")

        return 0

    except GenerationError as e:
        logger.error(f"Generation failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Generation interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Generation failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
