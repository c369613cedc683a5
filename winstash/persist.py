"""The on-disk state file."""

import logging
import os
import sys
import tempfile
from pathlib import Path

from winstash.errors import DirectoryUnavailable, NotFoundError, WriteFailure

logger = logging.getLogger(__name__)

STATE_FILE_NAME = 'displays-windows-state.json'


def get_cache_dir():
    """Return the per-user cache directory that holds instance subdirectories."""
    if sys.platform == 'win32':
        base = os.environ.get('LOCALAPPDATA', os.path.expanduser('~'))
        return Path(base)
    xdg = os.environ.get('XDG_CACHE_HOME')
    if xdg:
        return Path(xdg)
    return Path.home() / '.cache'


class DurableStateFile:
    """A single state file under <base>/<subdirectory>/.

    If the directory cannot be created the instance is disabled for good:
    reads raise DirectoryUnavailable and writes report failure, while the
    engine carries on in memory.
    """

    def __init__(self, path, enabled=True):
        self._path = Path(path)
        self._enabled = enabled

    @classmethod
    def open(cls, base_directory, subdirectory_name, filename=STATE_FILE_NAME):
        directory = Path(base_directory) / subdirectory_name
        try:
            directory.mkdir(parents=True, exist_ok=True)
            enabled = True
        except OSError as e:
            logger.warning(
                f"Could not make directory {directory} ({e}) - "
                f"window positions will not be saved to disk")
            enabled = False
        return cls(directory / filename, enabled=enabled)

    @property
    def path(self):
        return self._path

    @property
    def available(self):
        return self._enabled

    def write_atomic(self, data):
        """Replace the file with data. Returns True on success, False on failure."""
        if not self._enabled:
            return False
        try:
            self._replace_contents(data)
        except WriteFailure as e:
            logger.error(f"Failed to save {self._path.name}: {e}")
            return False
        logger.debug(f"Saved state to {self._path}")
        return True

    def _replace_contents(self, data):
        # Temp file + rename so a crash never leaves a truncated state file
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.stem}-", suffix='.tmp')
        except OSError as e:
            raise WriteFailure(f"cannot create temp file in {self._path.parent}: {e}") from e
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._path)
        except OSError as e:
            if Path(temp_path).exists():
                os.unlink(temp_path)
            raise WriteFailure(str(e)) from e

    def read_all(self):
        """Return the file's bytes.

        Raises DirectoryUnavailable if disabled and NotFoundError if there is
        no file yet. An empty or corrupt file is returned as-is; the codec
        rejects it.
        """
        if not self._enabled:
            raise DirectoryUnavailable(f"No directory for {self._path.name}")
        logger.debug(f"Loading {self._path}")
        try:
            return self._path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(f"No state file at {self._path}") from e

    def remove(self):
        """Delete the file. Returns True if a file was removed."""
        if not self._enabled or not self._path.exists():
            return False
        try:
            self._path.unlink()
        except OSError as e:
            logger.error(f"Could not remove {self._path}: {e}")
            return False
        return True

    def __repr__(self):
        state = 'enabled' if self._enabled else 'disabled'
        return f"DurableStateFile({str(self._path)!r}, {state})"
