"""Tests for the file-backed property store."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from conftest import TEST_DEFAULTS, make_test_identity

from ciao_configuration.config import CiaoConfig
from ciao_configuration.errors import (
    ConfigNotFoundError,
    InvalidDefaultsError,
    StoreUnavailableError,
)
from ciao_configuration.properties_file import read_properties
from ciao_configuration.store.base import PropertyStore
from ciao_configuration.store.file_store import FilePropertyStore, properties_file_name


class TestPropertiesFileName:
    def test_unclassified(self):
        assert properties_file_name(make_test_identity()) == "ciao-configuration-test-v1.properties"

    def test_classified(self):
        name = properties_file_name(make_test_identity("tenant-a"))
        assert name == "ciao-configuration-test-v1-tenant-a.properties"


class TestFilePropertyStore:
    def test_satisfies_protocol(self, tmp_path: Path):
        assert isinstance(FilePropertyStore(tmp_path), PropertyStore)

    def test_version_doesnt_exist(self, tmp_path: Path, identity):
        assert FilePropertyStore(tmp_path).version_exists(identity) is False

    def test_set_defaults_creates_file(self, tmp_path: Path, identity):
        store = FilePropertyStore(tmp_path)
        properties = store.set_defaults(identity, TEST_DEFAULTS)
        config_file = tmp_path / "ciao-configuration-test-v1.properties"
        assert config_file.is_file()
        assert read_properties(config_file) == TEST_DEFAULTS
        assert properties.get_config_keys() == {"testProperty1", "testProperty2"}
        assert store.version_exists(identity) is True

    def test_seeded_file_has_comment_header(self, tmp_path: Path, identity):
        FilePropertyStore(tmp_path).set_defaults(identity, TEST_DEFAULTS)
        text = (tmp_path / "ciao-configuration-test-v1.properties").read_text(encoding="utf-8")
        assert text.startswith("#Default configuration for ciao-configuration-test/v1\n")

    def test_load_never_adds_marker(self, tmp_path: Path, identity):
        store = FilePropertyStore(tmp_path)
        store.set_defaults(identity, TEST_DEFAULTS)
        properties = store.load_config(identity)
        assert properties.get_config_keys() == {"testProperty1", "testProperty2"}
        assert "configured" not in read_properties(store.file_for(identity))

    def test_load_reads_hand_written_file(self, tmp_path: Path, identity):
        (tmp_path / "ciao-configuration-test-v1.properties").write_text(
            "# maintained by ops\n"
            "queue.name = inbound\n"
            "endpoint:http://example.org/path\n",
            encoding="utf-8",
        )
        properties = FilePropertyStore(tmp_path).load_config(identity)
        assert properties.get_config_value("queue.name") == "inbound"
        assert properties.get_config_value("endpoint") == "http://example.org/path"

    def test_load_missing_raises_not_found(self, tmp_path: Path, identity):
        with pytest.raises(ConfigNotFoundError):
            FilePropertyStore(tmp_path).load_config(identity)

    def test_classifier_uses_separate_file(self, tmp_path: Path):
        store = FilePropertyStore(tmp_path)
        store.set_defaults(make_test_identity("tenant-a"), TEST_DEFAULTS)
        assert store.version_exists(make_test_identity()) is False
        assert store.version_exists(make_test_identity("tenant-a")) is True

    def test_creates_missing_directory(self, tmp_path: Path, identity):
        target = tmp_path / "nested" / "config"
        store = FilePropertyStore(target)
        assert store.version_exists(identity) is False
        assert target.is_dir()

    def test_defaults_to_dot_ciao_in_home(self, _isolated_home: Path, identity):
        store = FilePropertyStore()
        store.set_defaults(identity, TEST_DEFAULTS)
        assert store.path == _isolated_home / ".ciao"
        assert (_isolated_home / ".ciao" / "ciao-configuration-test-v1.properties").is_file()

    def test_expands_user_in_path(self, _isolated_home: Path):
        store = FilePropertyStore("~/custom")
        assert store.path == _isolated_home / "custom"


class TestFileDefaultsValidation:
    def test_none_defaults_rejected(self, tmp_path: Path, identity):
        with pytest.raises(InvalidDefaultsError):
            FilePropertyStore(tmp_path).set_defaults(identity, None)

    def test_empty_defaults_rejected(self, tmp_path: Path, identity):
        store = FilePropertyStore(tmp_path)
        with pytest.raises(InvalidDefaultsError):
            store.set_defaults(identity, {})
        assert not store.file_for(identity).exists()


class TestFileUnavailable:
    def test_path_is_a_file(self, tmp_path: Path, identity):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x", encoding="utf-8")
        store = FilePropertyStore(blocker)
        with pytest.raises(StoreUnavailableError):
            store.version_exists(identity)
        with pytest.raises(StoreUnavailableError):
            store.set_defaults(identity, TEST_DEFAULTS)

    def test_malformed_file_is_unavailable(self, tmp_path: Path, identity):
        (tmp_path / "ciao-configuration-test-v1.properties").write_text(
            "broken=\\u12\n", encoding="utf-8",
        )
        with pytest.raises(StoreUnavailableError, match="not a valid properties file"):
            FilePropertyStore(tmp_path).load_config(identity)

    def test_permission_error_on_lookup_is_unavailable(
        self, tmp_path: Path, identity, monkeypatch,
    ):
        def denied(self):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "is_file", denied)
        store = FilePropertyStore(tmp_path)
        with pytest.raises(StoreUnavailableError, match="Permission denied"):
            store.version_exists(identity)
        with pytest.raises(StoreUnavailableError):
            store.load_config(identity)


class TestFailedWrite:
    def test_failed_write_leaves_no_file(self, tmp_path: Path, identity, monkeypatch):
        def disk_full(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(os, "replace", disk_full)
        store = FilePropertyStore(tmp_path)
        with pytest.raises(StoreUnavailableError, match="No space left"):
            store.set_defaults(identity, TEST_DEFAULTS)
        assert list(tmp_path.iterdir()) == []
        assert not store.version_exists(identity)

    def test_next_run_seeds_after_failed_write(self, tmp_path: Path, monkeypatch):
        def disk_full(src, dst):
            raise OSError(28, "No space left on device")

        with monkeypatch.context() as m:
            m.setattr(os, "replace", disk_full)
            with pytest.raises(StoreUnavailableError):
                CiaoConfig("cip", "v1", {"k": "good"}, config_path=str(tmp_path))

        config = CiaoConfig("cip", "v1", {"k": "good"}, config_path=str(tmp_path))
        assert config.get_all_properties() == {"k": "good"}

    def test_unencodable_value_round_trips(self, tmp_path: Path, identity):
        store = FilePropertyStore(tmp_path)
        store.set_defaults(identity, {"k": "\udc80"})
        assert store.load_config(identity).get_all_properties() == {"k": "\udc80"}

    def test_rewrite_replaces_existing_file(self, tmp_path: Path, identity):
        store = FilePropertyStore(tmp_path)
        store.set_defaults(identity, {"old": "1"})
        store.set_defaults(identity, {"new": "2"})
        assert store.load_config(identity).get_all_properties() == {"new": "2"}
        assert [p.name for p in tmp_path.iterdir()] == [
            "ciao-configuration-test-v1.properties"
        ]


class TestFileRoundTrip:
    @pytest.mark.parametrize("char", [
        "\x00", "\x0b", "\x0c", "\x1c", "\x1d", "\x1e", "\x7f",
        "\x85", "\xa0", "\u2028", "\u2029", "\ufeff",
    ])
    def test_line_separator_like_chars_survive(self, tmp_path: Path, identity, char):
        store = FilePropertyStore(tmp_path)
        defaults = {"greeting": f"hello{char}world", f"k{char}ey": "v"}
        store.set_defaults(identity, defaults)
        assert store.load_config(identity).get_all_properties() == defaults
