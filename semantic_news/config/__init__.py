"""Configuration module -- exports Settings, StorageBackendConfig and load_settings."""

from semantic_news.config.loader import load_settings
from semantic_news.config.settings import Settings, StorageBackendConfig

__all__ = ["Settings", "StorageBackendConfig", "load_settings"]
