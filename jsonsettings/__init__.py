"""
jsonsettings

Persistent key-value settings backed by a single JSON file, addressed by
dotted key paths ("window.size.width", "foo\\.bar", ["plugins", name]).

    from jsonsettings import settings

    settings.configure(directory="/tmp/myapp", prettify=True, num_spaces=2)
    settings.set("window.size", {"width": 800, "height": 600})
    settings.get("window.size.width")   # -> 800
"""

from .ciphers import CipherRegistry, default_registry
from .config import DEFAULTS, SettingsConfig
from .errors import (
    ConfigurationError,
    CryptoError,
    ParseError,
    SerializationError,
    SettingsError,
    StorageError,
    ValidationError,
)
from .keypath import flatten_key_path, is_key_path, split_key_path
from .store import SettingsStore

# shared default instance
settings = SettingsStore()

__all__ = [
    "CipherRegistry",
    "ConfigurationError",
    "CryptoError",
    "DEFAULTS",
    "ParseError",
    "SerializationError",
    "SettingsConfig",
    "SettingsError",
    "SettingsStore",
    "StorageError",
    "ValidationError",
    "default_registry",
    "flatten_key_path",
    "is_key_path",
    "settings",
    "split_key_path",
]
