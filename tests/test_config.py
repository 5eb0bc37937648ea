"""Tests for configuration merging."""

import os

import pytest

from modresolve.config import ResolverConfig, build_config, env_config
from modresolve.constants import Constants
from modresolve.errors import ConfigError


class TestBuildConfig:
    """Precedence: defaults < file < environment < overrides."""

    def test_defaults(self, tmp_path):
        """Test default values and cache directory creation."""
        cfg = build_config({"cache_dir": str(tmp_path / "c")}, environ={})
        assert cfg.enable_http and cfg.enable_jsr and cfg.enable_node
        assert cfg.silent is False
        assert cfg.jsr_cache_ttl == Constants.JSR_CACHE_TTL_SEC
        assert cfg.jsr_registry == "https://jsr.io"
        assert os.path.isdir(cfg.cache_dir)

    def test_file_then_env_then_overrides(self, tmp_path):
        """Test layering of file, environment and overrides."""
        cfg_file = tmp_path / "settings.yml"
        cfg_file.write_text(
            "cache_dir: {}\n"
            "enable_http: false\n"
            "silent: true\n"
            "import_map:\n"
            "  '@/': ./src/\n".format(tmp_path / "from-file")
        )
        environ = {
            "MODRESOLVE_CACHE_DIR": str(tmp_path / "from-env"),
            "MODRESOLVE_SILENT": "false",
            "MODRESOLVE_JSR_CACHE_TTL": "2",
        }
        cfg = build_config({"enable_jsr": False}, config_file=str(cfg_file), environ=environ)

        assert cfg.cache_dir == str(tmp_path / "from-env")
        assert cfg.enable_http is False
        assert cfg.enable_jsr is False
        assert cfg.silent is False
        assert cfg.jsr_cache_ttl == 2 * 24 * 60 * 60
        assert dict(cfg.import_map) == {"@/": "./src/"}

    def test_none_overrides_do_not_mask_lower_layers(self, tmp_path):
        """Test that None overrides are ignored."""
        environ = {"MODRESOLVE_ENABLE_NODE": "0"}
        cfg = build_config({"cache_dir": str(tmp_path), "enable_node": None}, environ=environ)
        assert cfg.enable_node is False

    def test_unknown_override_key(self, tmp_path):
        """Test that unknown override keys raise ConfigError."""
        with pytest.raises(ConfigError):
            build_config({"cache_dir": str(tmp_path), "memory_limit": 1}, environ={})

    def test_unknown_file_key(self, tmp_path):
        """Test that unknown file keys raise ConfigError."""
        cfg_file = tmp_path / "settings.yml"
        cfg_file.write_text("polyfill: true\n")
        with pytest.raises(ConfigError):
            build_config({"cache_dir": str(tmp_path)}, config_file=str(cfg_file), environ={})

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML raises ConfigError."""
        cfg_file = tmp_path / "settings.yml"
        cfg_file.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError):
            build_config({"cache_dir": str(tmp_path)}, config_file=str(cfg_file), environ={})

    def test_bad_ttl(self):
        """Test that a non-numeric TTL raises ConfigError."""
        with pytest.raises(ConfigError):
            env_config({"MODRESOLVE_JSR_CACHE_TTL": "soon"})


class TestResolverConfig:
    """The config object is immutable."""

    def test_frozen(self, tmp_path):
        """Test that the config cannot be mutated."""
        cfg = ResolverConfig(cache_dir=str(tmp_path), import_map={"a": "b"})
        with pytest.raises(Exception):
            cfg.silent = True
        with pytest.raises(TypeError):
            cfg.import_map["c"] = "d"

    def test_registry_trailing_slash_trimmed(self, tmp_path):
        """Test trailing slash removal on the JSR registry."""
        cfg = ResolverConfig(cache_dir=str(tmp_path), jsr_registry="https://jsr.example/")
        assert cfg.jsr_registry == "https://jsr.example"
