"""
jsonsettings.codec
Document <-> bytes: JSON (compact or pretty), optionally encrypted.
"""

import json
from typing import Any

from .ciphers import CipherRegistry
from .config import SettingsConfig
from .errors import ParseError, SerializationError


def dump_json_bytes(obj: Any, indent: Any = None) -> bytes:
    # compact output has no whitespace at all, like JSON.stringify(obj)
    separators = (",", ":") if indent is None else (",", ": ")
    try:
        text = json.dumps(obj, ensure_ascii=False, indent=indent,
                          separators=separators, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError("Settings are not JSON serializable: %s" % e) from e
    return text.encode("utf-8")


def read_json_bytes(b: bytes) -> Any:
    try:
        return json.loads(b.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ParseError("Settings file is not valid UTF-8 text") from e
    except json.JSONDecodeError as e:
        raise ParseError("Settings file is not valid JSON: %s" % e) from e


def encode(document: Any, config: SettingsConfig, ciphers: CipherRegistry) -> bytes:
    data = dump_json_bytes(document, config.indent)
    if config.encryption_key:
        data = ciphers.encrypt(data, config.encryption_key, config.encryption_algorithm)
    return data


def decode(data: bytes, config: SettingsConfig, ciphers: CipherRegistry) -> Any:
    if config.encryption_key:
        data = ciphers.decrypt(data, config.encryption_key, config.encryption_algorithm)
    return read_json_bytes(data)
