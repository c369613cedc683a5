"""In-memory layout store: display signature -> window id -> snapshot."""

# width * SIGNATURE_MULTIPLIER + height. Heights >= 100000 collide; saved
# files depend on this exact formula, so it is kept as is.
SIGNATURE_MULTIPLIER = 100000


def display_signature(width, height):
    """Return the integer key for a display of the given pixel size."""
    return int(width) * SIGNATURE_MULTIPLIER + int(height)


def split_signature(signature):
    """Inverse of display_signature(), for display purposes."""
    return divmod(int(signature), SIGNATURE_MULTIPLIER)


class StateStore:
    """Two-level mapping of saved window layouts.

    Inner maps are plain dicts of window_id -> WindowSnapshot and are shared
    by reference, so a capture is visible to a later restore immediately.
    """

    def __init__(self):
        self._layouts = {}

    def get_or_create(self, signature):
        """Return the inner map for signature, inserting an empty one if absent."""
        inner = self._layouts.get(signature)
        if inner is None:
            inner = {}
            self._layouts[signature] = inner
        return inner

    def get(self, signature):
        return self._layouts.get(signature)

    def set(self, signature, windows):
        self._layouts[signature] = dict(windows)

    def signatures(self):
        return sorted(self._layouts)

    def items(self):
        """(signature, inner map) pairs in signature order."""
        return [(sig, self._layouts[sig]) for sig in self.signatures()]

    def window_count(self):
        return sum(len(inner) for inner in self._layouts.values())

    def clear(self):
        self._layouts.clear()

    def __contains__(self, signature):
        return signature in self._layouts

    def __len__(self):
        return len(self._layouts)

    def __eq__(self, other):
        if not isinstance(other, StateStore):
            return NotImplemented
        return self._layouts == other._layouts

    def __repr__(self):
        return (f"StateStore(displays={len(self)}, "
                f"windows={self.window_count()})")
