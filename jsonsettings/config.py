"""
jsonsettings.config
Store configuration: where the settings file lives and how it is encoded.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError

MAX_INDENT = 10


@dataclass(frozen=True)
class SettingsConfig:
    directory: Optional[str] = None  # if None, the store's data dir provider is used
    file_name: str = "settings.json"
    encryption_algorithm: str = "aes-256-cbc"
    encryption_key: Optional[str] = None  # None means no encryption
    prettify: bool = False
    num_spaces: int = 0
    atomic_save: bool = True

    @property
    def indent(self) -> Optional[int]:
        if self.prettify and self.num_spaces > 0:
            # the historical file format caps indentation at 10 spaces
            return min(self.num_spaces, MAX_INDENT)
        return None


DEFAULTS = SettingsConfig()

# historical option names
ALIASES: Dict[str, str] = {
    "dir": "directory",
    "fileName": "file_name",
    "encryptionAlgorithm": "encryption_algorithm",
    "encryptionKey": "encryption_key",
    "numSpaces": "num_spaces",
    "atomicSave": "atomic_save",
}

_FIELDS = {f.name for f in fields(SettingsConfig)}


def _coerce(name: str, value: Any) -> Any:
    if name == "directory" and value is not None:
        return str(value)
    if name == "num_spaces":
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigurationError("num_spaces must be a non-negative integer")
    if name == "file_name" and (not isinstance(value, str) or not value):
        raise ConfigurationError("file_name must be a non-empty string")
    if name == "encryption_key" and value == "":
        return None
    return value


def merge(config: SettingsConfig, overrides: Mapping[str, Any]) -> SettingsConfig:
    """Apply partial overrides onto config (not onto DEFAULTS)."""
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        name = ALIASES.get(key, key)
        if name not in _FIELDS:
            raise ConfigurationError("Unknown settings option: %s" % key)
        changes[name] = _coerce(name, value)
    return replace(config, **changes)
