"""
CONFIGURATION

Settings are read from the first YAML file in config_search_paths() (or an
explicit path) and layered over default_config().
"""
import logging
import os
import re
from datetime import date
from pathlib import Path

import yaml


class ConfigError(Exception):
    pass


SAMPLE_CONFIG_PATH = Path("stak.yaml")

DEFAULT_DATE_FORMAT = "%Y-%m-%d"


def default_config() -> dict:
    return {
        "data_dir": str(Path.cwd() / "notes"),
        "log_level": "info",
        "log_file": "/tmp/stak.log",
        "theme": "default",
        "date_format": DEFAULT_DATE_FORMAT,
        "auto_save": True,
        "fuzzy_search": True,
    }


def config_search_paths() -> list:
    home = Path.home()
    return [
        home / ".stak" / "config.yaml",
        home / ".config" / "stak" / "config.yaml",
        Path("stak.yaml"),
        Path(".stak.yaml"),
    ]


def find_config_file():
    for path in config_search_paths():
        if path.exists():
            return path
    return None


def load_config(config_path=None) -> dict:
    config = default_config()
    path = Path(config_path) if config_path else find_config_file()
    if path is not None and path.exists():
        try:
            with path.open("r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"failed to parse config file {path}: {e}") from e
        if not isinstance(user_config, dict):
            raise ConfigError(f"config file {path} must contain a mapping")
        for key, value in user_config.items():
            if key in config and value is not None:
                config[key] = value
            elif key not in config:
                logging.warning(f"Ignoring unknown config option '{key}' in {path}")
        config["config_file"] = str(path)
    elif config_path:
        logging.warning(f"Config file {path} not found, using defaults")
    config["data_dir"] = str(resolve_data_dir(config["data_dir"]))
    config["date_format"] = check_date_format(to_strftime(str(config["date_format"])))
    return config


def resolve_data_dir(data_dir) -> Path:
    path = Path(os.path.expanduser(str(data_dir)))
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


# ---------------------------------------------------------------------
# DATE FORMAT TOKENS
# ---------------------------------------------------------------------
# Accepts strftime patterns as-is, plus "YYYY-MM-DD" style tokens and the
# Go reference layout ("2006-01-02") used by older config files.
DATE_TOKENS = {
    "YYYY": "%Y",
    "2006": "%Y",
    "YY": "%y",
    "MM": "%m",
    "01": "%m",
    "DD": "%d",
    "02": "%d",
}
DATE_TOKEN_RE = re.compile("|".join(sorted(DATE_TOKENS, key=len, reverse=True)))


def to_strftime(pattern: str) -> str:
    if not pattern:
        return DEFAULT_DATE_FORMAT
    if "%" in pattern:
        return pattern
    return DATE_TOKEN_RE.sub(lambda m: DATE_TOKENS[m.group(0)], pattern)


def check_date_format(fmt: str) -> str:
    """Day files live directly in data_dir, so a rendered date must be a bare file name."""
    sample = date(2006, 1, 2).strftime(fmt)
    separators = [s for s in (os.sep, os.altsep, "/") if s]
    if not sample.strip() or any(s in sample for s in separators):
        raise ConfigError(f"date_format '{fmt}' must not produce an empty name or a path separator (got '{sample}')")
    return fmt


# ---------------------------------------------------------------------
# SAMPLE CONFIG
# ---------------------------------------------------------------------
def create_sample_config(path=SAMPLE_CONFIG_PATH) -> Path:
    sample = default_config()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.dump(sample, f, indent=2, sort_keys=False)
    logging.info(f"Sample config file created at {path}")
    return path
