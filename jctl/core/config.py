"""
Core configuration utilities for jctl
Handles YAML loading and engine-wide settings
"""

from pathlib import Path
from typing import Dict, Any, List, Optional
import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from .exceptions import ConfigError


class PathConfig:
    """Centralized path configuration for jctl"""

    @staticmethod
    def get_jctl_home() -> Path:
        """Get jctl home directory: ~/.jctl/"""
        return Path.home() / ".jctl"

    @staticmethod
    def get_config_file() -> Path:
        """Get engine config file: ~/.jctl/config.yaml"""
        return PathConfig.get_jctl_home() / "config.yaml"


class EngineConfig(BaseModel):
    """Engine-wide settings shared by the validator, linter and router"""
    check_your_answers_page: str = Field(default="check-your-answers",
                                         description="Conventional check-your-answers page id")
    default_completion_page: str = Field(default="confirmation",
                                         description="Completion page used when a journey declares none")
    reference_prefix: str = Field(default="APP", description="Prefix of minted reference numbers")
    imperative_verbs: List[str] = Field(
        default_factory=lambda: ["Enter", "Select", "Choose", "Provide", "Upload"],
        description="Verbs a required-field error message should start with"
    )
    journeys_dir: str = Field(default="static/journeys", description="Directory holding journey JSON files")


class ConfigLoader:
    """Core utility for configuration loading and parsing"""

    def __init__(self):
        self.logger = logger

    def load_yaml(self, config_path: str | Path) -> Dict[str, Any]:
        """Load and parse YAML configuration file"""
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to load config {config_path}: {e}")

        self.logger.debug(f"Loaded config from {config_path}")
        return config if config is not None else {}


def load_engine_config(config_path: Optional[str | Path] = None) -> EngineConfig:
    """
    Load engine settings, YAML values overriding defaults.

    Without an explicit path, ~/.jctl/config.yaml is used when present.
    """
    if config_path is None:
        default_path = PathConfig.get_config_file()
        if not default_path.exists():
            return EngineConfig()
        config_path = default_path

    data = ConfigLoader().load_yaml(config_path)
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    try:
        return EngineConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid engine config in {config_path}: {e}")
