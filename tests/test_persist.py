"""Tests for the on-disk state file."""

import os

import pytest
from winstash import persist
from winstash.errors import DirectoryUnavailable, NotFoundError
from winstash.persist import STATE_FILE_NAME, DurableStateFile, get_cache_dir


class TestOpen:

    def test_creates_nested_directory(self, tmp_path):
        state_file = DurableStateFile.open(tmp_path / 'a' / 'b', 'winstash')
        assert state_file.available
        assert (tmp_path / 'a' / 'b' / 'winstash').is_dir()
        assert state_file.path == tmp_path / 'a' / 'b' / 'winstash' / STATE_FILE_NAME

    def test_existing_directory_is_fine(self, tmp_path):
        (tmp_path / 'winstash').mkdir()
        assert DurableStateFile.open(tmp_path, 'winstash').available

    def test_unmakeable_directory_disables_with_one_warning(self, tmp_path, caplog):
        blocker = tmp_path / 'blocker'
        blocker.write_text('a file, not a directory')
        state_file = DurableStateFile.open(blocker, 'winstash')
        assert not state_file.available
        warnings = [r for r in caplog.records if r.levelname == 'WARNING']
        assert len(warnings) == 1
        assert 'will not be saved' in warnings[0].getMessage()

        caplog.clear()
        assert state_file.write_atomic(b'{}') is False
        assert state_file.write_atomic(b'{}') is False
        assert caplog.records == []

    def test_disabled_read_raises_directory_unavailable(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('x')
        state_file = DurableStateFile.open(blocker, 'winstash')
        with pytest.raises(DirectoryUnavailable):
            state_file.read_all()


class TestWriteAndRead:

    def test_write_then_read(self, tmp_path):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        assert state_file.write_atomic(b'{"kind": "map", "entries": []}')
        assert state_file.read_all() == b'{"kind": "map", "entries": []}'

    def test_write_replaces_previous_contents(self, tmp_path):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        state_file.write_atomic(b'a much longer first version of the file')
        state_file.write_atomic(b'short')
        assert state_file.read_all() == b'short'

    def test_no_temp_files_left_behind(self, tmp_path):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        state_file.write_atomic(b'data')
        assert os.listdir(tmp_path / 'winstash') == [STATE_FILE_NAME]

    def test_missing_file_raises_not_found(self, tmp_path):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        with pytest.raises(NotFoundError):
            state_file.read_all()

    def test_not_found_is_file_not_found_error(self, tmp_path):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        with pytest.raises(FileNotFoundError):
            state_file.read_all()

    def test_empty_file_is_returned_not_raised(self, tmp_path):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        state_file.path.write_bytes(b'')
        assert state_file.read_all() == b''

    def test_failed_replace_keeps_old_file_and_returns_false(self, tmp_path, monkeypatch, caplog):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        state_file.write_atomic(b'old')

        def failing_replace(src, dst):
            raise OSError('disk full')

        monkeypatch.setattr(persist.os, 'replace', failing_replace)
        assert state_file.write_atomic(b'new') is False
        assert state_file.read_all() == b'old'
        assert os.listdir(tmp_path / 'winstash') == [STATE_FILE_NAME]
        assert 'disk full' in caplog.text

    def test_remove(self, tmp_path):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        assert state_file.remove() is False
        state_file.write_atomic(b'x')
        assert state_file.remove() is True
        assert not state_file.path.exists()

    def test_remove_failure_reported(self, tmp_path, monkeypatch, caplog):
        state_file = DurableStateFile.open(tmp_path, 'winstash')
        state_file.write_atomic(b'x')

        def refuse(self, missing_ok=False):
            raise PermissionError('file in use')
        monkeypatch.setattr(type(state_file.path), 'unlink', refuse)
        assert state_file.remove() is False
        assert state_file.path.exists()
        assert 'file in use' in caplog.text


class TestCacheDir:

    def test_xdg_cache_home(self, monkeypatch, tmp_path):
        monkeypatch.setattr(persist.sys, 'platform', 'linux')
        monkeypatch.setenv('XDG_CACHE_HOME', str(tmp_path))
        assert get_cache_dir() == tmp_path

    def test_default_cache(self, monkeypatch):
        monkeypatch.setattr(persist.sys, 'platform', 'linux')
        monkeypatch.delenv('XDG_CACHE_HOME', raising=False)
        assert get_cache_dir().name == '.cache'

    def test_windows_local_appdata(self, monkeypatch, tmp_path):
        monkeypatch.setattr(persist.sys, 'platform', 'win32')
        monkeypatch.setenv('LOCALAPPDATA', str(tmp_path))
        assert get_cache_dir() == tmp_path
