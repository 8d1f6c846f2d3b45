"""
RiskSizer Utils Package
Configuration, logging, settings persistence and formatting helpers
"""

from risksizer.utils.config import Config, load_config
from risksizer.utils.settings_store import JsonSettingsStore, MemorySettingsStore, SettingsStore

__all__ = [
    "Config",
    "load_config",
    "JsonSettingsStore",
    "MemorySettingsStore",
    "SettingsStore",
]
