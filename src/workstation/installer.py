"""Writing artifacts to the install location."""
import os
from pathlib import Path
from typing import Union

from workstation.errors import InstallIOError, PathResolutionError
from workstation.logging import get_logger

logger = get_logger(__name__)

EXECUTABLE_MODE = 0o755


def expand_home(path: Union[str, Path]) -> Path:
    """Expand a leading ``~`` to the current user's home directory."""
    try:
        return Path(path).expanduser()
    except RuntimeError as e:
        raise PathResolutionError(str(path), str(e)) from e


def install_path(location: Union[str, Path], name: str) -> Path:
    return expand_home(location) / name


def install(location: Union[str, Path], name: str, data: bytes) -> Path:
    """Write ``data`` to ``location/name`` and mark it executable.

    The file is overwritten in place, not swapped in atomically.
    """
    path = install_path(location, name)
    try:
        path.write_bytes(data)
        os.chmod(path, EXECUTABLE_MODE)
    except OSError as e:
        raise InstallIOError(path, e.strerror or str(e)) from e

    logger.info("package_written", path=str(path), size=len(data))
    return path
