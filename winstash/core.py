"""Capture and restore orchestration (platform-agnostic)."""

import datetime
import logging
import time

from winstash import codec
from winstash.errors import DirectoryUnavailable, NotFoundError, WinstashError
from winstash.snapshot import WindowSnapshot
from winstash.store import StateStore, display_signature, split_signature

logger = logging.getLogger(__name__)

START_TIME = datetime.datetime.now().astimezone().isoformat(timespec='seconds')


class ProcessContext:
    """State that lives as long as the process, not the engine.

    state_saved starts False and is set once a store has been written during
    this process. Until then the state file may belong to a previous session
    whose window ids mean nothing now, so the engine starts empty instead of
    loading it. An engine torn down and recreated in the same process (for
    example around a suspend/resume) finds it True and reloads.
    """

    def __init__(self, state_saved=False):
        self.state_saved = state_saved

    def __repr__(self):
        return f"ProcessContext(state_saved={self.state_saved})"


PROCESS_CONTEXT = ProcessContext()


class EngineStats:
    """Running counters for one engine instance."""

    FIELDS = ('captures', 'restores', 'windows_saved', 'windows_restored',
              'windows_moved', 'windows_not_found', 'saves', 'save_failures',
              'load_failures')

    def __init__(self):
        for name in self.FIELDS:
            setattr(self, name, 0)

    def as_dict(self):
        return {name: getattr(self, name) for name in self.FIELDS}

    def __repr__(self):
        inner = ', '.join(f"{k}={v}" for k, v in self.as_dict().items())
        return f"EngineStats({inner})"


class RestoreResult:
    """Outcome of one restore_all() call."""

    def __init__(self, restored=0, moved=0, not_found=0):
        self.restored = restored
        self.moved = moved
        self.not_found = not_found

    def __eq__(self, other):
        if not isinstance(other, RestoreResult):
            return NotImplemented
        return (self.restored, self.moved, self.not_found) == \
            (other.restored, other.moved, other.not_found)

    def __repr__(self):
        return (f"RestoreResult(restored={self.restored}, moved={self.moved}, "
                f"not_found={self.not_found})")


class CaptureRestoreEngine:
    """Saves and reapplies window layouts keyed by display size.

    platform:   a PlatformBase that lists windows and reports display size
    state_file: a DurableStateFile, or None to keep state in memory only
    context:    the ProcessContext to consult (default: PROCESS_CONTEXT)

    No public method raises; failures are logged and degrade to an empty
    store or a skipped window.
    """

    def __init__(self, platform, state_file=None, context=None):
        self._platform = platform
        self._state_file = state_file
        self._context = context if context is not None else PROCESS_CONTEXT
        self._store = None
        self.stats = EngineStats()

    @property
    def store(self):
        """The loaded StateStore, or None before first use / after teardown."""
        return self._store

    def capture_all(self, reason):
        """Replace the current display's saved layout with the live windows.

        Returns the number of windows saved.
        """
        try:
            windows_states = self._get_window_state_map(reason)
            captured = {}
            for window in self._platform.list_visible_windows():
                try:
                    state = WindowSnapshot.capture(window)
                except Exception as e:
                    logger.error(f"{reason}: could not read window {window!r}: {e}")
                    continue
                captured[state.window_id] = state
                logger.info(f"Save {state}")
            # Swap only once enumeration has finished
            windows_states.clear()
            windows_states.update(captured)
            count = len(windows_states)
        except Exception:
            logger.exception(f"{reason}: capture failed")
            return 0
        self.stats.captures += 1
        self.stats.windows_saved += count
        self._save()
        return count

    def restore_all(self, reason):
        """Reapply the current display's saved layout to matching windows."""
        result = RestoreResult()
        try:
            windows_states = self._get_window_state_map(reason)
            for window in self._platform.list_visible_windows():
                state = windows_states.get(window.window_id)
                if state is None:
                    result.not_found += 1
                    logger.debug(f"{reason} did not find: {window.window_id} {window.title}")
                    continue
                try:
                    equal_rect = state.restore(window)
                except Exception as e:
                    logger.error(f"{reason}: could not restore {window!r}: {e}")
                    continue
                result.restored += 1
                if not equal_rect:
                    result.moved += 1
        except Exception:
            logger.exception(f"{reason}: restore failed")
            return result
        logger.info(f"{reason}: {result.moved}/{result.restored} restored windows were moved")
        self.stats.restores += 1
        self.stats.windows_restored += result.restored
        self.stats.windows_moved += result.moved
        self.stats.windows_not_found += result.not_found
        self._save()
        return result

    def teardown(self):
        """Save one last time, then drop the in-memory store."""
        if self._store is None:
            return
        self._save()
        self._store.clear()
        self._store = None
        logger.debug(f"Engine torn down: {self.stats}")

    def _get_store(self):
        if self._store is None:
            if self._context.state_saved:
                self._store = self._load()
            else:
                logger.debug("Initializing windows states to empty because "
                             "no state has been saved by this process")
                self._store = StateStore()
        return self._store

    def _load(self):
        if self._state_file is None:
            return StateStore()
        try:
            store = codec.deserialize(self._state_file.read_all())
        except (NotFoundError, DirectoryUnavailable) as e:
            # Missing file is the first run; a missing directory was warned at open
            logger.debug(f"{e}, starting empty")
            return StateStore()
        except (WinstashError, OSError) as e:
            self.stats.load_failures += 1
            logger.error(f"Could not load saved window states, starting empty: {e}")
            return StateStore()
        logger.debug(f"Loaded {store!r} from {self._state_file.path}")
        return store

    def _get_window_state_map(self, reason):
        width, height = self._platform.get_display_size()
        signature = display_signature(width, height)
        windows_states = self._get_store().get_or_create(signature)
        logger.debug(f"{reason}: map size: {len(windows_states)}  "
                     f"display size: {width}x{height}  start time: {START_TIME}")
        return windows_states

    def _save(self):
        if self._store is None or self._state_file is None:
            return
        if not self._state_file.available:
            # Already warned once when the directory could not be made
            return
        try:
            data = codec.serialize(self._store)
        except Exception:
            logger.exception("Failed to encode the windows states")
            self.stats.save_failures += 1
            return
        if self._state_file.write_atomic(data):
            self._context.state_saved = True
            self.stats.saves += 1
        else:
            self.stats.save_failures += 1
            logger.error("Failed to save the windows states to the file")


def read_saved_layouts(state_file):
    """Load a state file for display, bypassing the process-lifetime check.

    Returns (store, problem) where problem is None or a short description of
    why nothing could be read.
    """
    try:
        return codec.deserialize(state_file.read_all()), None
    except WinstashError as e:
        return StateStore(), str(e)
    except OSError as e:
        return StateStore(), f"could not read {state_file.path}: {e}"


def _current_signature(platform):
    try:
        return display_signature(*platform.get_display_size())
    except Exception as e:
        logger.error(f"Could not read display size: {e}")
        return None


def watch_displays(engine, platform, interval, sleep=time.sleep, max_ticks=None):
    """Keep a layout per display size until interrupted.

    Restores once at start, then every interval seconds captures the current
    layout, or restores instead when the display size has changed since the
    previous tick. On exit (Ctrl+C, SIGTERM, max_ticks) captures once more
    and tears the engine down.
    """
    engine.restore_all('Start: Restore')
    last = _current_signature(platform)
    ticks = 0
    try:
        while max_ticks is None or ticks < max_ticks:
            sleep(interval)
            ticks += 1
            current = _current_signature(platform)
            if current is None:
                continue
            if current != last:
                logger.info(f"Display changed: {_format_signature(last)} -> "
                            f"{_format_signature(current)}")
                engine.restore_all('Display change: Restore')
                last = current
            else:
                engine.capture_all('Periodic: Save')
    finally:
        engine.capture_all('Stop: Save')
        engine.teardown()
    return ticks


def _format_signature(signature):
    if signature is None:
        return 'unknown'
    width, height = split_signature(signature)
    return f"{width}x{height}"
