"""Test fixtures for CIAO configuration tests."""

from __future__ import annotations

from typing import Any

import etcd
import pytest

from ciao_configuration.models import CipIdentity

CIPNAME = "ciao-configuration-test"
VERSION = "v1"
ETCDURL = "http://127.0.0.1:2379"
TEST_DEFAULTS = {"testProperty1": "testValue1", "testProperty2": "testValue2"}


class _FakePool:
    def __init__(self) -> None:
        self.clear_count = 0

    def clear(self) -> None:
        self.clear_count += 1


class FakeEtcdClient:
    """In-memory stand-in for ``etcd.Client`` covering the v2 read/write calls.

    Returns real ``etcd.EtcdResult`` objects and raises real ``etcd``
    exceptions so the store code sees the same shapes as against a server.
    """

    def __init__(self, *, unreachable: bool = False) -> None:
        self.leaves: dict[str, str] = {}
        self.unreachable = unreachable
        self.http = _FakePool()
        self.reads: list[str] = []
        self.writes: list[tuple[str, str]] = []

    @staticmethod
    def _norm(key: str) -> str:
        return "/" + key.strip("/")

    def _check_reachable(self) -> None:
        if self.unreachable:
            raise etcd.EtcdConnectionFailed("Connection to etcd failed due to MaxRetryError")

    def _is_dir(self, key: str) -> bool:
        prefix = key + "/"
        return any(k.startswith(prefix) for k in self.leaves)

    def _node(self, key: str, recursive: bool) -> dict[str, Any]:
        if key in self.leaves:
            return {"key": key, "value": self.leaves[key]}
        prefix = key + "/"
        children = sorted({
            prefix + k[len(prefix):].split("/", 1)[0]
            for k in self.leaves if k.startswith(prefix)
        })
        nodes: list[dict[str, Any]] = []
        for child in children:
            if child in self.leaves:
                nodes.append({"key": child, "value": self.leaves[child]})
            elif recursive:
                nodes.append(self._node(child, recursive=True))
            else:
                nodes.append({"key": child, "dir": True})
        return {"key": key, "dir": True, "nodes": nodes}

    def read(self, key: str, recursive: bool = False, **kwargs: Any) -> etcd.EtcdResult:
        self._check_reachable()
        key = self._norm(key)
        self.reads.append(key)
        if key not in self.leaves and not self._is_dir(key):
            raise etcd.EtcdKeyNotFound(f"Key not found : {key}")
        return etcd.EtcdResult("get", self._node(key, recursive))

    def write(self, key: str, value: Any, **kwargs: Any) -> etcd.EtcdResult:
        self._check_reachable()
        key = self._norm(key)
        self.leaves[key] = str(value)
        self.writes.append((key, str(value)))
        return etcd.EtcdResult("set", {"key": key, "value": str(value)})

    def factory(self, url: str) -> FakeEtcdClient:
        return self


@pytest.fixture()
def fake_etcd() -> FakeEtcdClient:
    return FakeEtcdClient()


@pytest.fixture()
def identity() -> CipIdentity:
    return CipIdentity(name=CIPNAME, version=VERSION)


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path_factory, monkeypatch):
    """Point ~ at a temp dir so nothing ever writes to the real ~/.ciao."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("CIAO_ETCD_URL", raising=False)
    monkeypatch.delenv("CIAO_CONFIG_PATH", raising=False)
    monkeypatch.delenv("CIAO_CLASSIFIER", raising=False)
    return home


def make_test_identity(classifier: str | None = None) -> CipIdentity:
    return CipIdentity(name=CIPNAME, version=VERSION, classifier=classifier)
