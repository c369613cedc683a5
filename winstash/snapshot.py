"""Captured geometry and state flags of a single window."""

import enum
import logging

logger = logging.getLogger(__name__)


class MaximizeFlags(enum.IntFlag):
    """Which axes a window is maximized on."""

    NONE = 0
    HORIZONTAL = 1
    VERTICAL = 2
    BOTH = 3


class WindowSnapshot:
    """One window's frame rectangle and flags at one point in time.

    fullscreen, window_id and title are carried for diagnostics only;
    restore never applies them.
    """

    __slots__ = ('x', 'y', 'width', 'height', 'maximized', 'minimized',
                 'fullscreen', 'window_id', 'title')

    def __init__(self, x, y, width, height, maximized, minimized,
                 fullscreen, window_id, title):
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Snapshot size must be positive, got {width}x{height}")
        if isinstance(maximized, bool):
            # Hosts that only know maximized/not report a bool
            maximized = MaximizeFlags.BOTH if maximized else MaximizeFlags.NONE
        set_ = object.__setattr__
        set_(self, 'x', int(x))
        set_(self, 'y', int(y))
        set_(self, 'width', int(width))
        set_(self, 'height', int(height))
        set_(self, 'maximized', MaximizeFlags(maximized))
        set_(self, 'minimized', bool(minimized))
        set_(self, 'fullscreen', bool(fullscreen))
        set_(self, 'window_id', int(window_id))
        set_(self, 'title', title or '')

    def __setattr__(self, name, value):
        raise AttributeError(f"WindowSnapshot is immutable (tried to set {name})")

    @classmethod
    def capture(cls, window):
        """Read a live window's current frame rect and flags."""
        x, y, width, height = window.get_frame_rect()
        return cls(
            x, y, width, height,
            maximized=window.get_maximized(),
            minimized=window.is_minimized(),
            fullscreen=window.is_fullscreen(),
            window_id=window.window_id,
            title=window.title,
        )

    @property
    def rect(self):
        return (self.x, self.y, self.width, self.height)

    def render(self):
        return (f"x:{self.x}, y:{self.y}, w:{self.width}, h:{self.height}, "
                f"maximized:{self.maximized.name}, minimized:{self.minimized}, "
                f"fullscreen:{self.fullscreen}, id:{self.window_id}, "
                f"title:{self.title}")

    __str__ = render

    def __repr__(self):
        return f"WindowSnapshot({self.render()})"

    def __eq__(self, other):
        if not isinstance(other, WindowSnapshot):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self.__slots__)

    def __hash__(self):
        return hash(tuple(getattr(self, f) for f in self.__slots__))

    def restore(self, window):
        """Apply this snapshot to a live window.

        Geometry is fixed first (unmaximizing if needed, since a maximized
        window ignores move/resize), then maximized and minimized state.
        Returns True if the live rect already matched before restoring.
        """
        equal_rect = tuple(window.get_frame_rect()) == self.rect
        if not equal_rect:
            if window.get_maximized():
                window.unmaximize(MaximizeFlags.BOTH)
            window.move_resize_frame(self.x, self.y, self.width, self.height)
        self._set_maximized(window)
        self._set_minimized(window)
        self._log_differences(window)
        return equal_rect

    def _set_maximized(self, window):
        if window.get_maximized() != self.maximized:
            if self.maximized:
                window.maximize(self.maximized)
            else:
                window.unmaximize(MaximizeFlags.BOTH)

    def _set_minimized(self, window):
        if window.is_minimized() != self.minimized:
            if self.minimized:
                window.minimize()
            else:
                window.unminimize()

    def _log_differences(self, window):
        # The rect is not compared here: hosts often apply geometry
        # asynchronously after a maximize change.
        has_diffs = False
        minimized = window.is_minimized()
        if minimized != self.minimized:
            logger.error(f"Wrong minimized: {minimized}, title:{self.title}")
            has_diffs = True
        maximized = window.get_maximized()
        if maximized != self.maximized:
            logger.error(f"Wrong maximized: {MaximizeFlags(maximized).name}, "
                         f"title:{self.title}")
            has_diffs = True
        if has_diffs:
            logger.error(f"Expecting: {self}")
