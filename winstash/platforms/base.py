"""Abstract interfaces the engine uses to talk to the desktop."""

from abc import ABC, abstractmethod


class LiveWindow(ABC):
    """A live top-level window the engine can read and reposition.

    Implementations expose window_id (an int, unique for the session) and
    title as attributes.
    """

    window_id = 0
    title = ''

    @abstractmethod
    def get_frame_rect(self):
        """Return (x, y, width, height) of the window frame."""
        pass

    @abstractmethod
    def get_maximized(self):
        """Return the window's MaximizeFlags."""
        pass

    @abstractmethod
    def is_minimized(self):
        pass

    @abstractmethod
    def is_fullscreen(self):
        pass

    @abstractmethod
    def move_resize_frame(self, x, y, width, height):
        pass

    @abstractmethod
    def maximize(self, flags):
        pass

    @abstractmethod
    def unmaximize(self, flags):
        pass

    @abstractmethod
    def minimize(self):
        pass

    @abstractmethod
    def unminimize(self):
        pass

    def __repr__(self):
        return f"{type(self).__name__}(id={self.window_id}, title={self.title!r})"


class PlatformBase(ABC):
    """Abstract interface for platform-specific window enumeration."""

    def setup(self):
        """Platform-specific initialization (e.g., DPI awareness)."""
        pass

    @abstractmethod
    def get_display_size(self):
        """Return (width, height) of the whole desktop in pixels."""
        pass

    @abstractmethod
    def list_visible_windows(self):
        """Return the LiveWindows that would be listed in the taskbar."""
        pass
