"""Configuration schema definitions."""

from src.config.schemas.app import (
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
    "DigestConfig",
    "ExtractorConfig",
    "HackerNewsConfig",
    "V2exConfig",
]
