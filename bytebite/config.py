"""Configuration for bytebite.

Settings come from built-in defaults, then an optional YAML file, then
environment variables. The YAML file is ``$BYTEBITE_CONFIG`` if set, otherwise
``~/.bytebite/config.yaml`` when it exists.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
BASELINE_SCOPES = ("feed", "archive")

# Environment variable -> config field
ENV_OVERRIDES = {
    "BYTEBITE_DATA_DIR": "data_dir",
    "BYTEBITE_LOG_LEVEL": "log_level",
    "BYTEBITE_BASELINE_SCOPE": "baseline_scope",
    "BYTEBITE_REQUEST_TIMEOUT": "request_timeout",
}


def _default_config_path() -> Path:
    return Path.home() / ".bytebite" / "config.yaml"


@dataclass
class ServerConfig:
    """Runtime settings for the reader and its tool server."""

    name: str = "bytebite"
    log_level: str = "INFO"
    data_dir: Path = field(default_factory=lambda: Path.home() / ".bytebite" / "data")
    feeds_file: str = "rss_db.json"
    articles_file: str = "article_db.json"
    request_timeout: float = 30.0
    user_agent: str = "bytebite/0.1 (RSS Feed Reader)"
    baseline_scope: str = "feed"
    bootstrap: bool = True
    seed_feeds: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.data_dir = Path(self.data_dir).expanduser()
        self.log_level = str(self.log_level).upper()
        self.request_timeout = float(self.request_timeout)

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")
        if self.baseline_scope not in BASELINE_SCOPES:
            raise ValueError(
                f"baseline_scope must be one of {BASELINE_SCOPES}, got {self.baseline_scope!r}"
            )
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {self.request_timeout}")
        if not isinstance(self.seed_feeds, list):
            raise ValueError("seed_feeds must be a list of 'category | name | url' lines")

    @property
    def feeds_path(self) -> Path:
        return self.data_dir / self.feeds_file

    @property
    def articles_path(self) -> Path:
        return self.data_dir / self.articles_file


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def _env_values() -> Dict[str, Any]:
    values = {}
    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            values[field_name] = value
    return values


def load_config(path: Optional[Union[str, Path]] = None) -> ServerConfig:
    """Build a ServerConfig from defaults, the YAML file and the environment.

    Args:
        path: Explicit config file; must exist when given

    Raises:
        ValueError: If a setting is unknown or invalid
    """
    values: Dict[str, Any] = {}

    if path is None and os.environ.get("BYTEBITE_CONFIG"):
        path = os.environ["BYTEBITE_CONFIG"]

    if path is not None:
        values.update(_read_yaml(Path(path)))
    elif _default_config_path().is_file():
        values.update(_read_yaml(_default_config_path()))

    values.update(_env_values())

    known = {f.name for f in fields(ServerConfig)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown config settings: {', '.join(sorted(unknown))}")

    return ServerConfig(**values)


_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get or create the process-wide configuration."""
    global _config

    if _config is None:
        _config = load_config()

    return _config


def set_config(config: ServerConfig) -> None:
    """Install ``config`` as the process-wide configuration."""
    global _config
    _config = config
