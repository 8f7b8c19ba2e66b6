"""
jsonsettings.errors
Exception hierarchy raised by the settings store.
"""


class SettingsError(Exception):
    """Base class for every error raised by jsonsettings."""


class ValidationError(SettingsError, TypeError):
    """The given key path was not valid."""


class StorageError(SettingsError, OSError):
    """The settings directory or file could not be read or written."""


class ParseError(SettingsError, ValueError):
    """The stored bytes are not valid JSON (after optional decryption)."""


class CryptoError(SettingsError, ValueError):
    """Encryption or decryption failed (wrong key, corrupted data, unknown algorithm)."""


class SerializationError(SettingsError, ValueError):
    """The document contains a value that cannot be written as JSON."""


class ConfigurationError(SettingsError, ValueError):
    """An unknown or malformed configuration option was given."""
