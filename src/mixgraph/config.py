"""
Configuration management for MixGraph.

Loads and validates TOML config against strict bounds.
All tunable numeric parameters are bounded and validated at startup.
"""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional
import toml
import logging

from .generate.options import PlaylistOptions, AIPlaylistOptions

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when config validation fails."""
    pass


class Config:
    """Configuration loader and validator."""

    PARAM_BOUNDS = {
        "playlist": {
            "target_length": (5, 20),
            "max_bpm_change": (2, 16),
            "prefer_harmonic_mixing": None,
            "energy_mode": None,
        },
        "ai": {
            "style": None,
            "mood": None,
            "transition_complexity": None,
        },
        "session": {
            "autosave_delay_seconds": (0.5, 60.0),
        },
        "lookup": {
            "chunk_size": (1, 20),
        },
        "database": {
            "path": None,
        },
    }

    DEFAULT_CONFIG = {
        "config_version": "1.0",
        "playlist": {
            "target_length": 10,
            "max_bpm_change": 8,
            "prefer_harmonic_mixing": True,
            "energy_mode": "smooth",
            "seed_track_id": "",
        },
        "ai": {
            "style": "balanced",
            "mood": "progressive",
            "transition_complexity": "moderate",
        },
        "session": {
            "autosave_delay_seconds": 5.0,
        },
        "lookup": {
            "chunk_size": 5,
        },
        "database": {
            "path": "data/db/mixgraph.sqlite",
        },
        "export": {
            "format": "m3u",
            "output_dir": "data/playlists",
        },
    }

    def __init__(self, config_dict: Dict[str, Any]):
        """Initialize config from dictionary."""
        self.data = config_dict
        self._validate()

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load config from TOML file.

        Args:
            config_path: Path to mixgraph.toml. If None, uses MIXGRAPH_CONFIG_PATH env var
                        or defaults to configs/mixgraph.toml.

        Returns:
            Config instance.

        Raises:
            ConfigError: If config is invalid or unreadable.
        """
        if config_path is None:
            config_path = os.getenv("MIXGRAPH_CONFIG_PATH", "configs/mixgraph.toml")

        config_path = Path(config_path)

        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}. Using defaults.")
            return cls(copy.deepcopy(cls.DEFAULT_CONFIG))

        try:
            config_dict = toml.load(config_path)
        except (toml.TomlDecodeError, OSError) as e:
            raise ConfigError(f"Failed to load config from {config_path}: {e}")

        logger.info(f"Loaded config from {config_path}")
        return cls(config_dict)

    def _validate(self) -> None:
        """
        Validate all config parameters against PARAM_BOUNDS.

        Raises:
            ConfigError: If any parameter is out of bounds.
        """
        for section, params in self.PARAM_BOUNDS.items():
            if section not in self.data:
                logger.warning(f"Missing config section: {section}. Using defaults.")
                self.data[section] = copy.deepcopy(self.DEFAULT_CONFIG.get(section, {}))
                continue

            section_data = self.data[section]

            for param, bounds in params.items():
                if param not in section_data:
                    default_val = self.DEFAULT_CONFIG.get(section, {}).get(param)
                    if default_val is not None:
                        logger.warning(f"Missing param {section}.{param}. Using default: {default_val}")
                        section_data[param] = default_val
                    continue

                value = section_data[param]

                # Non-numeric parameters are checked when options are built
                if bounds is None:
                    continue

                min_val, max_val = bounds
                try:
                    in_bounds = min_val <= value <= max_val
                except TypeError:
                    raise ConfigError(
                        f"Parameter {section}.{param}={value!r} must be a number"
                    )
                if isinstance(value, bool) or not in_bounds:
                    raise ConfigError(
                        f"Parameter {section}.{param}={value} out of bounds "
                        f"[{min_val}, {max_val}]"
                    )

        # Choice-valued parameters are validated by the option dataclasses
        try:
            self.ai_options()
        except ValueError as e:
            raise ConfigError(f"Invalid playlist options: {e}")

        logger.info("✅ Config validation passed")

    def get(self, section: str, param: str, default: Any = None) -> Any:
        """Get a config parameter safely."""
        return self.data.get(section, {}).get(param, default)

    def __getitem__(self, section: str) -> Dict[str, Any]:
        """Allow dict-like access: config["playlist"]"""
        return self.data.get(section, {})

    def playlist_options(self) -> PlaylistOptions:
        """Base generation options from the [playlist] section."""
        section = self["playlist"]
        return PlaylistOptions(
            target_length=section["target_length"],
            max_bpm_change=section["max_bpm_change"],
            prefer_harmonic_mixing=section["prefer_harmonic_mixing"],
            energy_mode=section["energy_mode"],
        )

    def ai_options(self) -> AIPlaylistOptions:
        """[playlist] options plus the [ai] styling knobs."""
        base = self.playlist_options()
        ai = self["ai"]
        return AIPlaylistOptions(
            target_length=base.target_length,
            max_bpm_change=base.max_bpm_change,
            prefer_harmonic_mixing=base.prefer_harmonic_mixing,
            energy_mode=base.energy_mode,
            style=ai["style"],
            mood=ai["mood"],
            transition_complexity=ai["transition_complexity"],
        )

    def __repr__(self) -> str:
        version = self.data.get('config_version', 'unknown')
        return f"Config(version={version})"
