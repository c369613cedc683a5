"""winstash - remember and restore window positions per display layout."""

from winstash._version import (
    __version__, __app_name__, VERSION, BASE_VERSION, PIP_VERSION, DISPLAY_VERSION,
)
from winstash.core import CaptureRestoreEngine, ProcessContext, PROCESS_CONTEXT
from winstash.persist import DurableStateFile
from winstash.snapshot import MaximizeFlags, WindowSnapshot
from winstash.store import StateStore, display_signature
