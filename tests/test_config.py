"""
Tests for configuration loading.
"""
from pathlib import Path

import pytest
import yaml

from stak.config import (
    ConfigError,
    config_search_paths,
    create_sample_config,
    default_config,
    load_config,
    to_strftime,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with an empty home and working directory so no real config is found."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return home, work


def test_defaults_when_no_config(isolated):
    home, work = isolated
    config = load_config()
    assert config["data_dir"] == str(work / "notes")
    assert config["log_level"] == "info"
    assert config["log_file"] == "/tmp/stak.log"
    assert config["date_format"] == "%Y-%m-%d"
    assert "config_file" not in config


def test_search_order(isolated):
    home, work = isolated
    paths = config_search_paths()
    assert paths[0] == home / ".stak" / "config.yaml"
    assert paths[1] == home / ".config" / "stak" / "config.yaml"
    assert paths[2:] == [Path("stak.yaml"), Path(".stak.yaml")]


def test_home_config_wins_over_local(isolated):
    home, work = isolated
    (home / ".stak").mkdir()
    (home / ".stak" / "config.yaml").write_text("theme: home\n", encoding="utf-8")
    (work / "stak.yaml").write_text("theme: local\n", encoding="utf-8")
    assert load_config()["theme"] == "home"


def test_relative_data_dir_resolves_against_cwd(isolated):
    home, work = isolated
    (work / "stak.yaml").write_text("data_dir: scratch\nunknown_key: 1\n", encoding="utf-8")
    config = load_config()
    assert config["data_dir"] == str(work / "scratch")
    assert "unknown_key" not in config
    assert config["config_file"] == "stak.yaml"


def test_explicit_path(isolated, tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("log_level: debug\ndate_format: YYYY-MM-DD\n", encoding="utf-8")
    config = load_config(path)
    assert config["log_level"] == "debug"
    assert config["date_format"] == "%Y-%m-%d"


def test_invalid_yaml_raises(isolated, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("data_dir: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_non_mapping_raises(isolated, tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.parametrize("pattern", ["DD/MM/YYYY", "'%Y/%m/%d'", "'%D'", "' '"])
def test_date_format_must_be_a_file_name(isolated, tmp_path, pattern):
    path = tmp_path / "slashes.yaml"
    path.write_text(f"date_format: {pattern}\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="date_format"):
        load_config(path)


def test_date_format_with_dots_is_accepted(isolated, tmp_path):
    path = tmp_path / "dots.yaml"
    path.write_text("date_format: DD.MM.YYYY\n", encoding="utf-8")
    assert load_config(path)["date_format"] == "%d.%m.%Y"


@pytest.mark.parametrize("pattern, expected", [
    ("%Y-%m-%d", "%Y-%m-%d"),
    ("YYYY-MM-DD", "%Y-%m-%d"),
    ("2006-01-02", "%Y-%m-%d"),
    ("DD.MM.YY", "%d.%m.%y"),
    ("", "%Y-%m-%d"),
])
def test_to_strftime(pattern, expected):
    assert to_strftime(pattern) == expected


def test_create_sample_config(isolated, tmp_path):
    path = create_sample_config(tmp_path / "sample" / "stak.yaml")
    written = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert set(written) == set(default_config())
