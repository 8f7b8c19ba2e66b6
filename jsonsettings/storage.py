import logging
import os
import stat
import tempfile

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)


def ensure_dir(directory: str) -> None:
    if directory and not os.path.isdir(directory):
        os.makedirs(directory, exist_ok=True)
        logger.debug("Created settings directory %s", directory)


def read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def write_bytes(path: str, data: bytes) -> None:
    with open(path, "wb") as f:
        f.write(data)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


_UMASK = _current_umask()


def _target_mode(path: str) -> int:
    """Permission bits of the existing file, or 0666 & ~umask for a new one."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return 0o666 & ~_UMASK


def atomic_write_bytes(path: str, data: bytes) -> None:
    """
    Atomically write bytes to 'path' by writing to a temp file in the same
    directory and renaming it over the target.
    """
    d = os.path.dirname(path) or "."
    mode = _target_mode(path)
    fd, tmp = tempfile.mkstemp(dir=d, prefix=os.path.basename(path) + ".", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600; keep the mode a plain write would give
        os.chmod(tmp, mode)
        # atomic replace
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def default_data_dir(app_name: str) -> str:
    """
    Per-user data directory for app_name (e.g. ~/.local/share/<app> on Linux,
    %APPDATA%\\<app> on Windows).
    """
    return user_data_dir(appname=app_name, appauthor=False)
