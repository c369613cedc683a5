"""JSON encoding of a StateStore.

Wire shapes:

    {"kind": "map", "entries": [[key, value], ...]}      both map levels
    {"kind": "snapshot", "fields": {"x": ..., ...}}      leaf records

Outer keys are display signatures, inner keys are window ids. Entries and
fields are written in sorted order so equal stores produce equal bytes.

The decoder also reads the older {"dataType": "Map", "value": [...]} /
{"dataType": "WindowState", "value": {...}} spelling written by the GNOME
Shell extension this tool grew out of.
"""

import json

from winstash.errors import DecodeError
from winstash.snapshot import MaximizeFlags, WindowSnapshot
from winstash.store import StateStore

MAP_KIND = 'map'
SNAPSHOT_KIND = 'snapshot'

_LEGACY_MAP = 'Map'
_LEGACY_SNAPSHOT = 'WindowState'

_REQUIRED_FIELDS = ('x', 'y', 'width', 'height', 'maximized', 'minimized')


def serialize(store):
    """Encode a StateStore to UTF-8 bytes."""
    outer = []
    for signature, windows in store.items():
        inner = [[window_id, _encode_snapshot(snap)]
                 for window_id, snap in sorted(windows.items())]
        outer.append([signature, _encode_map(inner)])
    text = json.dumps(_encode_map(outer), indent=2, sort_keys=True)
    return text.encode('utf-8')


def deserialize(data):
    """Decode bytes produced by serialize() into a new StateStore.

    Raises DecodeError on anything that is not a well-formed store.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(f"State is not valid UTF-8: {e}") from e
    if not data.strip():
        raise DecodeError("State is empty")
    try:
        obj = json.loads(data)
    except json.JSONDecodeError as e:
        raise DecodeError(f"State is not valid JSON: {e}") from e

    store = StateStore()
    for sig_key, inner_obj in _decode_map(obj, 'display map'):
        signature = _decode_key(sig_key, 'display signature')
        windows = {}
        for id_key, snap_obj in _decode_map(inner_obj, f'window map {signature}'):
            window_id = _decode_key(id_key, 'window id')
            windows[window_id] = _decode_snapshot(snap_obj, window_id)
        store.set(signature, windows)
    return store


def _encode_map(entries):
    return {'kind': MAP_KIND, 'entries': entries}


def _encode_snapshot(snap):
    return {
        'kind': SNAPSHOT_KIND,
        'fields': {
            'x': snap.x,
            'y': snap.y,
            'width': snap.width,
            'height': snap.height,
            'maximized': int(snap.maximized),
            'minimized': snap.minimized,
            'fullscreen': snap.fullscreen,
            'window_id': snap.window_id,
            'title': snap.title,
        },
    }


def _decode_map(obj, what):
    if not isinstance(obj, dict):
        raise DecodeError(f"Expected a tagged {what}, got {type(obj).__name__}")
    if obj.get('kind') == MAP_KIND:
        entries = obj.get('entries')
    elif obj.get('dataType') == _LEGACY_MAP:
        entries = obj.get('value')
    else:
        raise DecodeError(f"Expected a tagged {what}, got keys {sorted(obj)}")
    if not isinstance(entries, list):
        raise DecodeError(f"{what} has no entry list")
    for entry in entries:
        if not isinstance(entry, list) or len(entry) != 2:
            raise DecodeError(f"{what} entry is not a [key, value] pair: {entry!r}")
    return entries


def _decode_key(key, what):
    if isinstance(key, bool):
        raise DecodeError(f"Invalid {what}: {key!r}")
    if isinstance(key, int):
        return key
    if isinstance(key, str):
        try:
            return int(key, 10)
        except ValueError:
            pass
    raise DecodeError(f"Invalid {what}: {key!r}")


def _decode_snapshot(obj, window_id):
    if not isinstance(obj, dict):
        raise DecodeError(f"Window {window_id}: expected a tagged snapshot")
    legacy = False
    if obj.get('kind') == SNAPSHOT_KIND:
        fields = obj.get('fields')
    elif obj.get('dataType') == _LEGACY_SNAPSHOT:
        fields = obj.get('value')
        legacy = True
    else:
        raise DecodeError(f"Window {window_id}: unknown record tag, keys {sorted(obj)}")
    if not isinstance(fields, dict):
        raise DecodeError(f"Window {window_id}: snapshot has no field object")

    missing = [f for f in _REQUIRED_FIELDS if f not in fields]
    if missing:
        raise DecodeError(f"Window {window_id}: missing field(s) {', '.join(missing)}")

    values = {name: _int_field(fields, name, window_id)
              for name in ('x', 'y', 'width', 'height')}
    maximized = fields['maximized']
    if isinstance(maximized, bool):
        maximized = MaximizeFlags.BOTH if maximized else MaximizeFlags.NONE
    elif isinstance(maximized, int) and 0 <= maximized <= int(MaximizeFlags.BOTH):
        maximized = MaximizeFlags(maximized)
    else:
        raise DecodeError(f"Window {window_id}: invalid maximized {maximized!r}")
    minimized = _bool_field(fields, 'minimized', window_id)
    fullscreen = (_bool_field(fields, 'fullscreen', window_id)
                  if 'fullscreen' in fields else False)

    id_field = 'id' if legacy else 'window_id'
    saved_id = fields.get(id_field, window_id)
    if isinstance(saved_id, bool) or not isinstance(saved_id, int):
        raise DecodeError(f"Window {window_id}: invalid {id_field} {saved_id!r}")
    title = fields.get('title') or ''
    if not isinstance(title, str):
        raise DecodeError(f"Window {window_id}: invalid title {title!r}")

    try:
        return WindowSnapshot(
            values['x'], values['y'], values['width'], values['height'],
            maximized=maximized, minimized=minimized, fullscreen=fullscreen,
            window_id=saved_id, title=title,
        )
    except ValueError as e:
        raise DecodeError(f"Window {window_id}: {e}") from e


def _int_field(fields, name, window_id):
    value = fields[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Window {window_id}: {name} must be an integer, got {value!r}")
    return value


def _bool_field(fields, name, window_id):
    value = fields[name]
    if not isinstance(value, bool):
        raise DecodeError(f"Window {window_id}: {name} must be a boolean, got {value!r}")
    return value
