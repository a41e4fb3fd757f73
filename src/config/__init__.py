"""Configuration loading and validation module."""

from src.config.loader import ConfigLoader, ConfigValidationError, load_config
from src.config.schemas import (
    AiConfig,
    AiProvider,
    DigestConfig,
    ExtractorConfig,
    HackerNewsConfig,
    V2exConfig,
)


__all__ = [
    "AiConfig",
    "AiProvider",
    "ConfigLoader",
    "ConfigValidationError",
    "DigestConfig",
    "ExtractorConfig",
    "HackerNewsConfig",
    "V2exConfig",
    "load_config",
]
