from __future__ import annotations

import json
from pathlib import Path

import yaml

from .errors import ConfigurationError

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

DEFAULTS = {
    "pages": "pages",
    "templates": "templates",
    "static": "static",
    "comments": "comments",
    "output": "public",
    "index_page": "index.md",
    "collected_dirs": ["blog"],
    "gallery_dirs": ["photo"],
    "latest_alias": "latest.html",
    "posts_per_page": 6,
    "build_workers": 0,
    "custom_domain": "",
    "write_nojekyll": True,
    "port": 8000,
}


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must be a mapping: {path}")
    return data
