"""Tests for the defaults loader."""

import pytest

from intake.core import config_loader
from intake.core.exceptions import ConfigError


@pytest.fixture
def defaults_dir(tmp_path, monkeypatch):
    """Point the loader at a temporary config directory."""
    monkeypatch.setattr(config_loader, "_CONFIG_BASE_DIR", tmp_path)
    config_loader.clear_global_config_cache()
    yield tmp_path
    config_loader.clear_global_config_cache()


@pytest.mark.unit
def test_shipped_defaults_have_sections():
    """Test that the shipped defaults file carries both sections."""
    config_loader.clear_global_config_cache()
    defaults = config_loader.load_defaults()

    assert "ai" in defaults["scoring"]["vocabulary"]
    assert defaults["eligibility"]


@pytest.mark.unit
def test_load_section(defaults_dir):
    """Test loading a section, and a missing one."""
    (defaults_dir / "defaults.yaml").write_text("scoring:\n  points_per_keyword: 4\n")

    assert config_loader.load_section("scoring") == {"points_per_keyword": 4}
    assert config_loader.load_section("eligibility") == {}


@pytest.mark.unit
def test_non_mapping_section_ignored(defaults_dir):
    """Test that a scalar section yields an empty mapping."""
    (defaults_dir / "defaults.yaml").write_text("scoring: 3\n")

    assert config_loader.load_section("scoring") == {}


@pytest.mark.unit
def test_missing_file(defaults_dir):
    """Test that a missing file raises ConfigError."""
    with pytest.raises(ConfigError, match="not found"):
        config_loader.load_defaults()


@pytest.mark.unit
def test_invalid_yaml(defaults_dir):
    """Test that malformed YAML raises ConfigError."""
    (defaults_dir / "defaults.yaml").write_text("scoring: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        config_loader.load_defaults()


@pytest.mark.unit
def test_top_level_list(defaults_dir):
    """Test that a non-mapping document raises ConfigError."""
    (defaults_dir / "defaults.yaml").write_text("- a\n- b\n")

    with pytest.raises(ConfigError, match="YAML object"):
        config_loader.load_defaults()
