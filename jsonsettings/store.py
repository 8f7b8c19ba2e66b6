"""
jsonsettings.store

SettingsStore: read, write and delete values in a JSON settings file by key path.

Every call is one load-mutate-save cycle against the file on disk; nothing is
cached between calls. The configuration is snapshotted once when a call starts
and used for the whole cycle. There is no locking between concurrent calls:
the last save wins.

Blocking:      get, has, set, unset (alias delete)
Non-blocking:  aget, ahas, aset, aunset (alias adelete), awaitables that run
               file I/O and encode/decode (which may run a KDF) in worker
               threads via asyncio.to_thread
"""

import asyncio
import logging
import os
from contextlib import contextmanager
from functools import partial
from typing import Any, Awaitable, Callable, Iterator, List, Mapping, Optional

from . import codec, storage, tree
from .ciphers import CipherRegistry, default_registry
from .config import DEFAULTS, SettingsConfig, merge
from .errors import StorageError
from .keypath import normalize_key_path, split_key_path

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "jsonsettings"


@contextmanager
def _storage_errors(action: str, path: str) -> Iterator[None]:
    try:
        yield
    except StorageError:
        raise
    except OSError as e:
        logger.warning("Failed to %s settings file %s: %s", action, path, e)
        raise StorageError("Failed to %s settings file %s: %s" % (action, path, e)) from e


class SettingsStore:
    """
    data_dir_provider: callable returning the default directory when no
    'directory' option is configured (defaults to the per-user data dir
    for app_name).
    ciphers: encryption strategies keyed by algorithm name.
    options: initial configuration, same names as configure().
    """

    def __init__(
        self,
        app_name: str = DEFAULT_APP_NAME,
        data_dir_provider: Optional[Callable[[], str]] = None,
        ciphers: Optional[CipherRegistry] = None,
        **options: Any,
    ) -> None:
        self.app_name = app_name
        self._data_dir_provider = data_dir_provider or partial(storage.default_data_dir, app_name)
        self.ciphers = ciphers or default_registry()
        self._config = merge(DEFAULTS, options)

    # Configuration -------------------------------------------------------
    @property
    def config(self) -> SettingsConfig:
        return self._config

    def configure(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> SettingsConfig:
        """
        Merge the given options onto the current configuration, e.g.
        configure(prettify=True, num_spaces=4). Options not given keep their
        current value.
        """
        overrides = dict(options or {})
        overrides.update(kwargs)
        self._config = merge(self._config, overrides)
        return self._config

    def reset(self) -> None:
        self._config = DEFAULTS

    def _dir_path(self, cfg: SettingsConfig) -> str:
        if cfg.directory:
            return cfg.directory
        return os.fspath(self._data_dir_provider())

    def _file_path(self, cfg: SettingsConfig) -> str:
        return os.path.join(self._dir_path(cfg), cfg.file_name)

    def file_path(self) -> str:
        """Absolute path of the settings file for the current configuration."""
        return os.path.abspath(self._file_path(self._config))

    resolve_file_path = file_path

    # Key paths ------------------------------------------------------------
    @staticmethod
    def _optional_segments(key_path: Any) -> Optional[List[str]]:
        # None or "" addresses the whole document
        if key_path is None:
            return None
        path = normalize_key_path(key_path)
        if not path:
            return None
        return split_key_path(path)

    @staticmethod
    def _required_segments(key_path: Any) -> List[str]:
        return split_key_path(normalize_key_path(key_path))

    # Blocking cycle -------------------------------------------------------
    def _save(self, document: Any, cfg: SettingsConfig) -> None:
        data = codec.encode(document, cfg, self.ciphers)
        path = self._file_path(cfg)
        with _storage_errors("save", path):
            storage.ensure_dir(os.path.dirname(path))
            if cfg.atomic_save:
                storage.atomic_write_bytes(path, data)
            else:
                storage.write_bytes(path, data)
        logger.debug("Saved settings to %s (atomic=%s)", path, cfg.atomic_save)

    def _load(self, cfg: SettingsConfig) -> Any:
        path = self._file_path(cfg)
        with _storage_errors("load", path):
            storage.ensure_dir(os.path.dirname(path))
            exists = os.path.exists(path)
        if not exists:
            self._save({}, cfg)
            logger.debug("Created settings file %s", path)
        with _storage_errors("load", path):
            data = storage.read_bytes(path)
        logger.debug("Loaded settings from %s", path)
        return codec.decode(data, cfg, self.ciphers)

    def get(self, key_path: Any = None, default: Any = None) -> Any:
        """
        Value at key_path, or default when it does not exist.
        Without a key path the whole settings document is returned.
        """
        segments = self._optional_segments(key_path)
        document = self._load(self._config)
        if segments is None:
            return document
        return tree.get_value(document, segments, default)

    def has(self, key_path: Any) -> bool:
        """True if key_path exists (a stored null counts). Raises ValidationError for an invalid key path."""
        segments = self._required_segments(key_path)
        return tree.has_value(self._load(self._config), segments)

    def set(self, key_path: Any, value: Any) -> None:
        """
        Set the value at key_path, creating intermediate objects as needed.
        With key_path None the whole settings document is replaced by value.
        """
        segments = self._optional_segments(key_path)
        cfg = self._config
        if segments is None:
            self._save(value, cfg)
            return
        document = tree.set_value(self._load(cfg), segments, value)
        self._save(document, cfg)

    def unset(self, key_path: Any) -> None:
        """Delete the value at key_path. Missing paths are not an error."""
        segments = self._required_segments(key_path)
        cfg = self._config
        document = tree.delete_value(self._load(cfg), segments)
        self._save(document, cfg)

    delete = unset

    # Non-blocking cycle ---------------------------------------------------
    async def _asave(self, document: Any, cfg: SettingsConfig) -> None:
        data = await asyncio.to_thread(codec.encode, document, cfg, self.ciphers)
        path = self._file_path(cfg)
        write = storage.atomic_write_bytes if cfg.atomic_save else storage.write_bytes
        with _storage_errors("save", path):
            await asyncio.to_thread(storage.ensure_dir, os.path.dirname(path))
            await asyncio.to_thread(write, path, data)
        logger.debug("Saved settings to %s (atomic=%s)", path, cfg.atomic_save)

    async def _aload(self, cfg: SettingsConfig) -> Any:
        path = self._file_path(cfg)
        with _storage_errors("load", path):
            await asyncio.to_thread(storage.ensure_dir, os.path.dirname(path))
            exists = await asyncio.to_thread(os.path.exists, path)
        if not exists:
            await self._asave({}, cfg)
            logger.debug("Created settings file %s", path)
        with _storage_errors("load", path):
            data = await asyncio.to_thread(storage.read_bytes, path)
        logger.debug("Loaded settings from %s", path)
        return await asyncio.to_thread(codec.decode, data, cfg, self.ciphers)

    # The public async methods are plain functions so that key path
    # validation and the config snapshot happen at call time.
    def aget(self, key_path: Any = None, default: Any = None) -> Awaitable[Any]:
        return self._aget(self._optional_segments(key_path), default, self._config)

    async def _aget(self, segments: Optional[List[str]], default: Any, cfg: SettingsConfig) -> Any:
        document = await self._aload(cfg)
        if segments is None:
            return document
        return tree.get_value(document, segments, default)

    def ahas(self, key_path: Any) -> Awaitable[bool]:
        return self._ahas(self._required_segments(key_path), self._config)

    async def _ahas(self, segments: List[str], cfg: SettingsConfig) -> bool:
        return tree.has_value(await self._aload(cfg), segments)

    def aset(self, key_path: Any, value: Any) -> Awaitable[None]:
        return self._aset(self._optional_segments(key_path), value, self._config)

    async def _aset(self, segments: Optional[List[str]], value: Any, cfg: SettingsConfig) -> None:
        if segments is None:
            await self._asave(value, cfg)
            return
        document = tree.set_value(await self._aload(cfg), segments, value)
        await self._asave(document, cfg)

    def aunset(self, key_path: Any) -> Awaitable[None]:
        return self._aunset(self._required_segments(key_path), self._config)

    async def _aunset(self, segments: List[str], cfg: SettingsConfig) -> None:
        document = tree.delete_value(await self._aload(cfg), segments)
        await self._asave(document, cfg)

    adelete = aunset
