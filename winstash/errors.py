"""Error taxonomy for the durable state layer.

None of these reach the caller of capture/restore: the engine catches them
at the persistence boundary and falls back to an empty store or a logged
no-op.
"""


class WinstashError(Exception):
    """Base class for winstash errors."""


class DirectoryUnavailable(WinstashError, OSError):
    """The state directory could not be created; persistence is disabled."""


class DecodeError(WinstashError, ValueError):
    """The state file is not valid structured text or has a malformed record."""


class WriteFailure(WinstashError, OSError):
    """Writing the state file failed. The next save retries with current state."""


class NotFoundError(WinstashError, FileNotFoundError):
    """No state file exists yet (expected on first run)."""
