"""In-memory stand-ins for the desktop, shared by the test modules."""

import pytest

from winstash.core import ProcessContext
from winstash.platforms.base import LiveWindow, PlatformBase
from winstash.snapshot import MaximizeFlags


class FakeWindow(LiveWindow):
    """A window that records every mutation made to it.

    Like real window managers, it ignores move/resize while maximized.
    """

    def __init__(self, window_id, x=0, y=0, width=800, height=600,
                 maximized=MaximizeFlags.NONE, minimized=False,
                 fullscreen=False, title=None):
        self.window_id = window_id
        self.title = title if title is not None else f'Window {window_id}'
        self.rect = (x, y, width, height)
        self.maximized = MaximizeFlags(maximized)
        self.minimized = minimized
        self.fullscreen = fullscreen
        self.calls = []

    def get_frame_rect(self):
        return self.rect

    def get_maximized(self):
        return self.maximized

    def is_minimized(self):
        return self.minimized

    def is_fullscreen(self):
        return self.fullscreen

    def move_resize_frame(self, x, y, width, height):
        self.calls.append(('move_resize', x, y, width, height))
        if not self.maximized:
            self.rect = (x, y, width, height)

    def maximize(self, flags):
        self.calls.append(('maximize', MaximizeFlags(flags)))
        self.maximized = MaximizeFlags(flags)

    def unmaximize(self, flags):
        self.calls.append(('unmaximize', MaximizeFlags(flags)))
        self.maximized = MaximizeFlags(int(self.maximized) & ~int(flags))

    def minimize(self):
        self.calls.append(('minimize',))
        self.minimized = True

    def unminimize(self):
        self.calls.append(('unminimize',))
        self.minimized = False

    def state(self):
        return (self.rect, self.maximized, self.minimized)


class FakePlatform(PlatformBase):

    def __init__(self, windows=None, display_size=(1920, 1080)):
        self.windows = list(windows or [])
        self.display_size = display_size

    def get_display_size(self):
        return self.display_size

    def list_visible_windows(self):
        return list(self.windows)


@pytest.fixture
def make_window():
    return FakeWindow


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def context():
    """A fresh process-lifetime context, so tests never share the global one."""
    return ProcessContext()
