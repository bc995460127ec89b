"""
Unit tests for configuration loading and validation.
"""

import copy
from pathlib import Path

import pytest
from mixgraph.config import Config, ConfigError
from mixgraph.generate.options import AIPlaylistOptions, PlaylistOptions


@pytest.fixture
def defaults():
    return copy.deepcopy(Config.DEFAULT_CONFIG)


class TestLoad:
    """Test reading config files."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = Config.load(str(tmp_path / "absent.toml"))
        assert config.get("playlist", "target_length") == 10
        assert config.get("database", "path") == "data/db/mixgraph.sqlite"

    def test_defaults_not_shared(self, tmp_path):
        config = Config.load(str(tmp_path / "absent.toml"))
        config["playlist"]["target_length"] = 15
        assert Config.DEFAULT_CONFIG["playlist"]["target_length"] == 10

    def test_load_file(self, tmp_path):
        path = tmp_path / "mixgraph.toml"
        path.write_text(
            'config_version = "1.0"\n'
            "[playlist]\n"
            "target_length = 12\n"
            "max_bpm_change = 6\n"
            "prefer_harmonic_mixing = false\n"
            'energy_mode = "dynamic"\n'
            "[ai]\n"
            'style = "safe"\n'
            'mood = "chill"\n'
            'transition_complexity = "simple"\n'
        )
        config = Config.load(str(path))

        assert config["playlist"]["target_length"] == 12
        assert config.get("ai", "mood") == "chill"
        assert repr(config) == "Config(version=1.0)"

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.toml"
        path.write_text("[lookup]\nchunk_size = 3\n")
        monkeypatch.setenv("MIXGRAPH_CONFIG_PATH", str(path))

        config = Config.load()
        assert config.get("lookup", "chunk_size") == 3

    def test_malformed_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[playlist\ntarget_length = ")
        with pytest.raises(ConfigError):
            Config.load(str(path))

    def test_shipped_config_is_valid(self):
        config = Config.load(str(Path(__file__).parent.parent / "configs" / "mixgraph.toml"))
        assert isinstance(config.ai_options(), AIPlaylistOptions)


class TestValidation:
    """Test bounds and choice validation."""

    def test_missing_section_filled(self, defaults):
        del defaults["session"]
        config = Config(defaults)
        assert config.get("session", "autosave_delay_seconds") == 5.0

    def test_missing_param_filled(self, defaults):
        del defaults["playlist"]["max_bpm_change"]
        config = Config(defaults)
        assert config.get("playlist", "max_bpm_change") == 8

    @pytest.mark.parametrize(
        "section, param, value",
        [
            ("playlist", "target_length", 3),
            ("playlist", "target_length", 25),
            ("playlist", "max_bpm_change", 20),
            ("session", "autosave_delay_seconds", 0.1),
            ("lookup", "chunk_size", 0),
        ],
    )
    def test_out_of_bounds(self, defaults, section, param, value):
        defaults[section][param] = value
        with pytest.raises(ConfigError):
            Config(defaults)

    @pytest.mark.parametrize(
        "section, param, value",
        [
            ("playlist", "target_length", "ten"),
            ("session", "autosave_delay_seconds", "soon"),
            ("lookup", "chunk_size", True),
        ],
    )
    def test_non_numeric(self, defaults, section, param, value):
        defaults[section][param] = value
        with pytest.raises(ConfigError):
            Config(defaults)

    def test_fractional_target_length(self, defaults):
        defaults["playlist"]["target_length"] = 7.5
        with pytest.raises(ConfigError):
            Config(defaults)

    def test_bad_energy_mode(self, defaults):
        defaults["playlist"]["energy_mode"] = "turbo"
        with pytest.raises(ConfigError):
            Config(defaults)

    def test_bad_style(self, defaults):
        defaults["ai"]["style"] = "wild"
        with pytest.raises(ConfigError):
            Config(defaults)

    def test_get_default(self, defaults):
        config = Config(defaults)
        assert config.get("playlist", "nonexistent", "fallback") == "fallback"
        assert config["nonexistent"] == {}


class TestOptionBuilders:
    """Test conversion to generation options."""

    def test_playlist_options(self, defaults):
        defaults["playlist"]["energy_mode"] = "high"
        options = Config(defaults).playlist_options()

        assert options == PlaylistOptions(energy_mode="high")

    def test_ai_options(self, defaults):
        defaults["ai"]["transition_complexity"] = "complex"
        options = Config(defaults).ai_options()

        assert options.transition_complexity == "complex"
        assert options.target_length == 10
        assert options.base_options() == PlaylistOptions()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
