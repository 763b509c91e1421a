"""Configuration schemas"""

from .schemas import EditorConfig, StoreConfig, EditorDefaults, PlaceholderConfig, LoggingConfig

__all__ = [
    "EditorConfig",
    "StoreConfig",
    "EditorDefaults",
    "PlaceholderConfig",
    "LoggingConfig",
]
