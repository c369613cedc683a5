"""Tests for encoding and decoding the layout store."""

import json

import pytest
from winstash.codec import deserialize, serialize
from winstash.errors import DecodeError
from winstash.snapshot import MaximizeFlags, WindowSnapshot
from winstash.store import StateStore, display_signature


def _snap(window_id, x=10, y=20, width=300, height=200,
          maximized=MaximizeFlags.NONE, minimized=False, title='t'):
    return WindowSnapshot(x, y, width, height, maximized=maximized,
                          minimized=minimized, fullscreen=False,
                          window_id=window_id, title=title)


def _sample_store():
    store = StateStore()
    store.set(display_signature(1920, 1080), {
        7: _snap(7, x=100, y=50, width=800, height=600, title='Editor'),
        9: _snap(9, maximized=MaximizeFlags.BOTH, title='Browser – News'),
    })
    store.set(display_signature(3840, 1080), {
        7: _snap(7, x=-1920, minimized=True),
        11: _snap(11, maximized=MaximizeFlags.VERTICAL),
    })
    store.get_or_create(display_signature(1280, 800))
    return store


def _snapshot_obj(**fields):
    base = {'x': 1, 'y': 2, 'width': 3, 'height': 4,
            'maximized': 0, 'minimized': False}
    base.update(fields)
    return {'kind': 'snapshot', 'fields': base}


def _wrap(snapshot_obj, window_key=5, signature_key=1):
    return json.dumps({'kind': 'map', 'entries': [
        [signature_key, {'kind': 'map', 'entries': [[window_key, snapshot_obj]]}],
    ]}).encode('utf-8')


class TestRoundTrip:

    def test_round_trip_preserves_content(self):
        store = _sample_store()
        assert deserialize(serialize(store)) == store

    def test_empty_store(self):
        assert deserialize(serialize(StateStore())) == StateStore()

    def test_output_stable_regardless_of_insertion_order(self):
        a = StateStore()
        a.set(2, {1: _snap(1), 2: _snap(2)})
        a.set(1, {3: _snap(3)})
        b = StateStore()
        b.set(1, {3: _snap(3)})
        b.set(2, {2: _snap(2), 1: _snap(1)})
        assert serialize(a) == serialize(b)

    def test_accepts_str_input(self):
        store = _sample_store()
        assert deserialize(serialize(store).decode('utf-8')) == store


class TestWireShape:

    def test_tagged_shapes(self):
        obj = json.loads(serialize(_sample_store()))
        assert obj['kind'] == 'map'
        signature, inner = obj['entries'][0]
        assert signature == display_signature(1280, 800)
        assert inner == {'kind': 'map', 'entries': []}
        _, inner = obj['entries'][1]
        window_id, record = inner['entries'][0]
        assert window_id == 7
        assert record['kind'] == 'snapshot'
        assert record['fields'] == {
            'x': 100, 'y': 50, 'width': 800, 'height': 600,
            'maximized': 0, 'minimized': False, 'fullscreen': False,
            'window_id': 7, 'title': 'Editor',
        }

    def test_booleans_and_flags_are_native(self):
        obj = json.loads(serialize(_sample_store()))
        _, inner = obj['entries'][2]
        fields = dict(inner['entries'])[11]['fields']
        assert fields['maximized'] == 2
        assert fields['minimized'] is False


class TestDecodeKeys:

    def test_string_keys(self):
        store = deserialize(_wrap(_snapshot_obj(), window_key='5',
                                  signature_key='192001080'))
        assert store.get(192001080)[5].rect == (1, 2, 3, 4)

    def test_window_id_defaults_to_map_key(self):
        store = deserialize(_wrap(_snapshot_obj(), window_key=5))
        assert store.get(1)[5].window_id == 5

    @pytest.mark.parametrize('key', ['abc', 1.5, None, True, [1]])
    def test_invalid_key(self, key):
        with pytest.raises(DecodeError):
            deserialize(_wrap(_snapshot_obj(), window_key=key))


class TestDecodeErrors:

    @pytest.mark.parametrize('data', [
        b'',
        b'   \n',
        b'\xff\xfe\x00garbage',
        b'{not json',
        b'[]',
        b'{"kind": "list", "entries": []}',
        b'{"kind": "map"}',
        b'{"kind": "map", "entries": [[1]]}',
        b'{"kind": "map", "entries": [[1, 2]]}',
        b'{"kind": "map", "entries": [[1, {"kind": "map", "entries": [[5, {"x": 1}]]}]]}',
    ])
    def test_corrupt_input(self, data):
        with pytest.raises(DecodeError):
            deserialize(data)

    @pytest.mark.parametrize('field', ['x', 'y', 'width', 'height', 'maximized', 'minimized'])
    def test_missing_required_field(self, field):
        obj = _snapshot_obj()
        del obj['fields'][field]
        with pytest.raises(DecodeError, match=field):
            deserialize(_wrap(obj))

    @pytest.mark.parametrize('fields', [
        {'x': '1'},
        {'width': True},
        {'width': 0},
        {'height': -5},
        {'minimized': 0},
        {'maximized': 7},
        {'maximized': 'BOTH'},
        {'fullscreen': 'no'},
        {'title': 12},
        {'window_id': 'x'},
    ])
    def test_wrong_field_types(self, fields):
        with pytest.raises(DecodeError):
            deserialize(_wrap(_snapshot_obj(**fields)))

    def test_decode_error_is_value_error(self):
        with pytest.raises(ValueError):
            deserialize(b'nope')


class TestLegacyFormat:
    """Files written by the GNOME Shell extension use dataType/value tags."""

    LEGACY = {
        'dataType': 'Map',
        'value': [[192001080, {'dataType': 'Map', 'value': [[
            2871,
            {'dataType': 'WindowState', 'value': {
                'x': 100, 'y': 50, 'width': 800, 'height': 600,
                'maximized': 3, 'minimized': False, 'fullscreen': False,
                'id': 2871, 'title': 'Files', 'log': 3,
            }},
        ]]}]],
    }

    def test_reads_legacy_file(self):
        store = deserialize(json.dumps(self.LEGACY).encode('utf-8'))
        snap = store.get(192001080)[2871]
        assert snap.rect == (100, 50, 800, 600)
        assert snap.maximized is MaximizeFlags.BOTH
        assert snap.window_id == 2871
        assert snap.title == 'Files'

    def test_legacy_boolean_maximized(self):
        legacy = json.loads(json.dumps(self.LEGACY))
        record = legacy['value'][0][1]['value'][0][1]['value']
        record['maximized'] = True
        store = deserialize(json.dumps(legacy))
        assert store.get(192001080)[2871].maximized is MaximizeFlags.BOTH

    def test_rewritten_in_current_format(self):
        store = deserialize(json.dumps(self.LEGACY))
        obj = json.loads(serialize(store))
        assert obj['kind'] == 'map'
        assert 'dataType' not in json.dumps(obj)
