"""Configuration model and parser for ohmyskill.yaml."""

from ohmyskill.config.models import AppConfig
from ohmyskill.config.parser import ConfigError, load_config

__all__ = [
    "AppConfig",
    "ConfigError",
    "load_config",
]
