"""Environment-backed settings (API keys and tokens)."""

from .app import AppSettings, get_settings


__all__ = ["AppSettings", "get_settings"]
