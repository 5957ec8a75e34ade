"""yomitore configuration management."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from yomitore.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"


def _default_data_dir() -> Path:
    return Path.home() / ".config" / "yomitore"


@dataclass
class YomitoreConfig:
    """Configuration for the trainer."""

    # Paths
    data_dir: Path = field(default_factory=_default_data_dir)

    # Model provider (OpenAI-compatible chat completions)
    api_base_url: str = "https://api.groq.com/openai/v1"
    chat_model: str = "openai/gpt-oss-120b"
    request_timeout: int = 60
    api_key: Optional[str] = None

    # Training
    character_count_options: tuple[int, ...] = (200, 400, 800)
    default_character_count: int = 400

    # Reports
    report_days: int = 30
    report_weeks: int = 4
    summary_days: int = 7

    log_level: str = "INFO"

    @property
    def config_file(self) -> Path:
        """YAML file holding the stored API key."""
        return self.data_dir / CONFIG_FILENAME

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> YomitoreConfig:
        """Load configuration from environment variables and an optional .env file."""
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        try:
            timeout = int(os.getenv("YOMITORE_REQUEST_TIMEOUT", "60"))
        except ValueError:
            raise ConfigurationError(
                "YOMITORE_REQUEST_TIMEOUT must be an integer",
                config_key="YOMITORE_REQUEST_TIMEOUT",
            )

        config = cls(
            api_base_url=os.getenv("YOMITORE_API_BASE_URL", cls.api_base_url),
            chat_model=os.getenv("YOMITORE_CHAT_MODEL", cls.chat_model),
            request_timeout=timeout,
            api_key=os.getenv("GROQ_API_KEY") or None,
            log_level=os.getenv("YOMITORE_LOG_LEVEL", "INFO").upper(),
        )

        if env_data_dir := os.getenv("YOMITORE_DATA_DIR"):
            config.data_dir = Path(env_data_dir).expanduser()

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary. The API key is masked."""
        return {
            "paths": {
                "data_dir": str(self.data_dir),
                "config_file": str(self.config_file),
            },
            "api": {
                "base_url": self.api_base_url,
                "model": self.chat_model,
                "timeout": self.request_timeout,
                "api_key_set": bool(self.api_key),
            },
            "training": {
                "character_count_options": list(self.character_count_options),
                "default_character_count": self.default_character_count,
            },
            "reports": {
                "days": self.report_days,
                "weeks": self.report_weeks,
                "summary_days": self.summary_days,
            },
            "log_level": self.log_level,
        }


def load_api_key(config: YomitoreConfig) -> Optional[str]:
    """
    Read the stored API key.

    Returns:
        The key, or None if no usable key is stored.

    Raises:
        ConfigurationError: If the config file exists but is not valid YAML.
    """
    path = config.config_file
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}", config_key="api_key")

    if not isinstance(data, dict):
        return None
    key = data.get("api_key")
    return str(key) if key else None


def save_api_key(config: YomitoreConfig, api_key: str) -> None:
    """Store the API key in the config file, readable by the owner only."""
    config.ensure_directories()
    path = config.config_file
    # Restrict an existing file before the key is written into it
    if os.name == "posix" and path.exists():
        os.chmod(path, 0o600)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        yaml.safe_dump({"api_key": api_key}, f)
    logger.info(f"Saved API key to {path}")


# Global default configuration
_default_config: Optional[YomitoreConfig] = None


def get_config() -> YomitoreConfig:
    """Get the global configuration, creating from environment if needed."""
    global _default_config
    if _default_config is None:
        _default_config = YomitoreConfig.from_env()
    return _default_config


def set_config(config: YomitoreConfig) -> None:
    """Set the global configuration."""
    global _default_config
    _default_config = config
