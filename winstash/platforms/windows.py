"""Windows implementation of window enumeration and manipulation."""

import ctypes
import fnmatch
import logging
import os

from winstash.platforms.base import LiveWindow, PlatformBase
from winstash.snapshot import MaximizeFlags

logger = logging.getLogger(__name__)

# Lazy imports - only loaded on Windows
win32gui = None
win32con = None
win32process = None
win32api = None
psutil = None


def _load_win32():
    """Lazy-load pywin32 modules."""
    global win32gui, win32con, win32process, win32api, psutil
    if win32gui is not None:
        return
    try:
        import win32gui as _win32gui
        import win32con as _win32con
        import win32process as _win32process
        import win32api as _win32api
        import psutil as _psutil
        win32gui = _win32gui
        win32con = _win32con
        win32process = _win32process
        win32api = _win32api
        psutil = _psutil
    except ImportError as e:
        raise RuntimeError(
            "pywin32 and psutil are required on Windows. "
            "Install with: pip install pywin32 psutil"
        ) from e


# Shell windows that are never part of a user's layout
SYSTEM_CLASSES = {
    'Progman',                      # Desktop (Program Manager)
    'Shell_TrayWnd',                # Taskbar
    'Shell_SecondaryTrayWnd',       # Secondary monitor taskbar
    'NotifyIconOverflowWindow',     # Tray icon overflow
    'Windows.UI.Core.CoreWindow',   # Start Menu, Action Center, etc.
    'WorkerW',                      # Desktop worker windows
    'DV2ControlHost',               # Start menu host
}

DWMWA_CLOAKED = 14

# GetSystemMetrics indices for the virtual screen (all monitors)
SM_CXVIRTUALSCREEN = 78
SM_CYVIRTUALSCREEN = 79

# ShowWindow / WINDOWPLACEMENT.showCmd values
SW_MAXIMIZE = 3
SW_SHOWNOACTIVATE = 4
SW_SHOWMINNOACTIVE = 7
SW_RESTORE = 9

# WINDOWPLACEMENT.flags: the window comes back maximized when unminimized
WPF_RESTORETOMAXIMIZED = 0x0002


def _get_cloaked_state(hwnd):
    """Return the DWM cloaked value for a window (0 if not cloaked)."""
    try:
        cloaked = ctypes.c_int(0)
        ctypes.windll.dwmapi.DwmGetWindowAttribute(
            hwnd, DWMWA_CLOAKED,
            ctypes.byref(cloaked), ctypes.sizeof(cloaked)
        )
        return cloaked.value
    except Exception:
        return 0


class Win32Window(LiveWindow):
    """A top-level HWND.

    Geometry is the window's normal (restored) rectangle from
    GetWindowPlacement, in workspace coordinates. GetWindowRect would give
    the (-32000, -32000) parking spot for a minimized window and the monitor
    for a maximized one, neither of which is worth saving.
    """

    def __init__(self, hwnd, title, process_name=''):
        self.hwnd = hwnd
        self.window_id = int(hwnd)
        self.title = title
        self.process_name = process_name

    def _get_placement(self):
        # (flags, showCmd, ptMinPosition, ptMaxPosition, rcNormalPosition)
        return tuple(win32gui.GetWindowPlacement(self.hwnd))

    def _set_placement(self, flags, show_cmd, normal=None):
        _, _, min_pos, max_pos, old_normal = self._get_placement()
        win32gui.SetWindowPlacement(
            self.hwnd, (flags, show_cmd, min_pos, max_pos, normal or old_normal))

    def _current_show_cmd(self):
        """The showCmd that keeps the window in its present state, without activating."""
        if win32gui.IsIconic(self.hwnd):
            return SW_SHOWMINNOACTIVE
        if win32gui.IsZoomed(self.hwnd):
            return SW_MAXIMIZE
        return SW_SHOWNOACTIVATE

    def get_frame_rect(self):
        left, top, right, bottom = self._get_placement()[4]
        return (left, top, right - left, bottom - top)

    def get_maximized(self):
        # Win32 has no per-axis maximization. IsZoomed is False while
        # minimized, so a minimized window reports what it will restore to.
        if win32gui.IsZoomed(self.hwnd):
            return MaximizeFlags.BOTH
        if win32gui.IsIconic(self.hwnd) and self._get_placement()[0] & WPF_RESTORETOMAXIMIZED:
            return MaximizeFlags.BOTH
        return MaximizeFlags.NONE

    def is_minimized(self):
        return bool(win32gui.IsIconic(self.hwnd))

    def is_fullscreen(self):
        """True if the window covers its whole monitor and is not maximized."""
        if win32gui.IsZoomed(self.hwnd) or win32gui.IsIconic(self.hwnd):
            return False
        try:
            monitor = win32api.MonitorFromWindow(self.hwnd)
            area = win32api.GetMonitorInfo(monitor)['Monitor']
        except Exception:
            return False
        return tuple(win32gui.GetWindowRect(self.hwnd)) == tuple(area)

    def move_resize_frame(self, x, y, width, height):
        # Sets the normal rectangle only; a minimized window stays minimized
        # and reappears there when the user brings it back.
        flags = self._get_placement()[0]
        self._set_placement(flags, self._current_show_cmd(),
                            (x, y, x + width, y + height))

    def maximize(self, flags):
        if win32gui.IsIconic(self.hwnd):
            placement_flags = self._get_placement()[0] | WPF_RESTORETOMAXIMIZED
            self._set_placement(placement_flags, SW_SHOWMINNOACTIVE)
        else:
            win32gui.ShowWindow(self.hwnd, SW_MAXIMIZE)

    def unmaximize(self, flags):
        if win32gui.IsZoomed(self.hwnd):
            win32gui.ShowWindow(self.hwnd, SW_RESTORE)
        elif win32gui.IsIconic(self.hwnd):
            placement_flags = self._get_placement()[0]
            if placement_flags & WPF_RESTORETOMAXIMIZED:
                self._set_placement(placement_flags & ~WPF_RESTORETOMAXIMIZED,
                                    SW_SHOWMINNOACTIVE)

    def minimize(self):
        win32gui.ShowWindow(self.hwnd, SW_SHOWMINNOACTIVE)

    def unminimize(self):
        win32gui.ShowWindow(self.hwnd, SW_RESTORE)


class WindowsPlatform(PlatformBase):

    def __init__(self, exclude_processes=None):
        self._own_pid = os.getpid()
        self._exclude_processes = [p.lower() for p in (exclude_processes or [])]

    def setup(self):
        """Set DPI awareness for accurate window coordinates."""
        try:
            # Per-Monitor DPI Aware V2 (Win10 1703+)
            ctypes.windll.user32.SetProcessDpiAwarenessContext(
                ctypes.c_void_p(-4)  # DPI_AWARENESS_CONTEXT_PER_MONITOR_AWARE_V2
            )
            logger.debug("Set DPI awareness: Per-Monitor V2")
        except (AttributeError, OSError):
            try:
                ctypes.windll.shcore.SetProcessDpiAwareness(2)
                logger.debug("Set DPI awareness: Per-Monitor V1")
            except (AttributeError, OSError):
                logger.debug("Could not set DPI awareness (older Windows?)")

    def get_display_size(self):
        _load_win32()
        return (win32api.GetSystemMetrics(SM_CXVIRTUALSCREEN),
                win32api.GetSystemMetrics(SM_CYVIRTUALSCREEN))

    def list_visible_windows(self):
        _load_win32()
        windows = []

        def enum_callback(hwnd, _):
            try:
                window = self._inspect_window(hwnd)
                if window is not None:
                    windows.append(window)
            except Exception as e:
                logger.debug(f"Error inspecting hwnd {hwnd}: {e}")
            return True

        win32gui.EnumWindows(enum_callback, None)
        return windows

    def _inspect_window(self, hwnd):
        """Return a Win32Window if hwnd would show in the taskbar, else None."""
        class_name = win32gui.GetClassName(hwnd)
        if class_name in SYSTEM_CLASSES:
            return None

        style = win32gui.GetWindowLong(hwnd, win32con.GWL_STYLE)
        ex_style = win32gui.GetWindowLong(hwnd, win32con.GWL_EXSTYLE)
        if style & win32con.WS_CHILD:
            return None

        # Taskbar rule: tool and owned windows are skipped unless APPWINDOW
        app_window = ex_style & win32con.WS_EX_APPWINDOW
        if not app_window:
            if ex_style & win32con.WS_EX_TOOLWINDOW:
                return None
            if win32gui.GetWindow(hwnd, win32con.GW_OWNER):
                return None

        if not win32gui.IsWindowVisible(hwnd) and not (style & win32con.WS_MINIMIZE):
            return None
        if _get_cloaked_state(hwnd):
            return None

        _, pid = win32process.GetWindowThreadProcessId(hwnd)
        if pid == self._own_pid:
            return None
        process_name = self._get_process_name(pid)
        if self._is_excluded(process_name):
            logger.debug(f"Excluded hwnd {hwnd} ({process_name})")
            return None

        title = win32gui.GetWindowText(hwnd) or f"<{class_name}>"
        return Win32Window(hwnd, title, process_name)

    def _get_process_name(self, pid):
        try:
            return psutil.Process(pid).name()
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            return f"<pid:{pid}>"

    def _is_excluded(self, process_name):
        name = process_name.lower()
        return any(fnmatch.fnmatch(name, pattern) for pattern in self._exclude_processes)
