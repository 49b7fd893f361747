"""etcd-backed property store.

Wraps the ``python-etcd`` client (v2 keys API).  A configuration set for
``(name, version, classifier)`` lives under the directory
``ciao/<name>/<version>[/<classifier>]`` with one leaf per key.

Loading a set also writes the ``configured`` marker leaf, so a set that has
been read back at least once is distinguishable from one that was only
seeded.  The file store has no equivalent.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any
from urllib.parse import urlsplit

import etcd

from ciao_configuration.errors import (
    ConfigNotFoundError,
    InvalidDefaultsError,
    StoreUnavailableError,
)
from ciao_configuration.models import CipIdentity
from ciao_configuration.properties import CipProperties
from ciao_configuration.store.base import require_defaults

logger = logging.getLogger(__name__)

ROOT_KEY = "ciao"
CONFIGURED_KEY = "configured"
CONFIGURED_VALUE = "true"
DEFAULT_PORT = 2379

ClientFactory = Callable[[str], etcd.Client]


def client_from_url(url: str, *, read_timeout: float = 60.0) -> etcd.Client:
    """Build a python-etcd client from ``http(s)://[user:pass@]host[:port]``.

    Raises ValueError for URLs that do not name an http(s) host.
    """
    parsed = urlsplit(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(f"Unsupported etcd URL: {url!r}")
    kwargs: dict[str, Any] = {}
    if parsed.username:
        kwargs["username"] = parsed.username
        kwargs["password"] = parsed.password or ""
    return etcd.Client(
        host=parsed.hostname,
        port=parsed.port or DEFAULT_PORT,
        protocol=parsed.scheme,
        read_timeout=read_timeout,
        allow_reconnect=False,
        **kwargs,
    )


def etcd_path(identity: CipIdentity) -> str:
    return "/".join((ROOT_KEY, *identity.segments))


def _release(client: Any) -> None:
    pool = getattr(client, "http", None)
    if pool is not None:
        pool.clear()


class EtcdPropertyStore:
    """Property store keeping each configuration key as an etcd leaf.

    Parameters
    ----------
    url:
        Base URL of the etcd service, e.g. ``http://127.0.0.1:2379``.
    client_factory:
        ``factory(url) -> etcd.Client``.  A fresh client is built for every
        operation and its connection pool cleared afterwards.  Defaults to
        :func:`client_from_url`.
    read_timeout:
        Socket read timeout handed to the default client factory.
    log:
        Logger for this store.  Defaults to the module logger.
    """

    backend = "etcd"

    def __init__(
        self,
        url: str,
        *,
        client_factory: ClientFactory | None = None,
        read_timeout: float = 60.0,
        log: logging.Logger | None = None,
    ) -> None:
        self.url = url
        self.location = url
        self._client_factory = client_factory or functools.partial(
            client_from_url, read_timeout=read_timeout,
        )
        self._log = log or logger

    @contextmanager
    def _client(self) -> Iterator[etcd.Client]:
        try:
            client = self._client_factory(self.url)
        except (ValueError, etcd.EtcdException) as exc:
            raise StoreUnavailableError(
                f"Can't connect to etcd URL {self.url}: {exc}"
            ) from exc
        try:
            yield client
        finally:
            _release(client)

    def _unavailable(self, action: str, key: str, exc: Exception) -> StoreUnavailableError:
        self._log.debug("etcd %s failed for %s: %s", action, key, exc)
        return StoreUnavailableError(f"etcd at {self.url} failed to {action} {key}: {exc}")

    def version_exists(self, identity: CipIdentity) -> bool:
        path = etcd_path(identity)
        with self._client() as client:
            try:
                client.read(path)
            except etcd.EtcdKeyNotFound:
                return False
            except etcd.EtcdException as exc:
                raise self._unavailable("read", path, exc) from exc
        return True

    def load_config(self, identity: CipIdentity) -> CipProperties:
        path = etcd_path(identity)
        with self._client() as client:
            try:
                result = client.read(path, recursive=True)
            except etcd.EtcdKeyNotFound as exc:
                raise ConfigNotFoundError(f"No etcd config stored at {path}") from exc
            except etcd.EtcdException as exc:
                raise self._unavailable("read", path, exc) from exc

            entries = _direct_leaves(path, result)
            marker = f"{path}/{CONFIGURED_KEY}"
            try:
                client.write(marker, CONFIGURED_VALUE)
            except etcd.EtcdException as exc:
                raise self._unavailable("write", marker, exc) from exc

        entries[CONFIGURED_KEY] = CONFIGURED_VALUE
        self._log.debug("Loaded %d etcd keys from %s", len(entries), path)
        return CipProperties(identity, entries)

    def set_defaults(
        self, identity: CipIdentity, defaults: Mapping[str, Any] | None,
    ) -> CipProperties:
        entries = require_defaults(defaults)
        for key in entries:
            # etcd v2 leaves "_" prefixed keys out of directory listings
            if not key or "/" in key or key.startswith("_"):
                raise InvalidDefaultsError(f"Invalid etcd configuration key: {key!r}")

        path = etcd_path(identity)
        with self._client() as client:
            for key, value in entries.items():
                child = f"{path}/{key}"
                try:
                    client.write(child, value)
                except etcd.EtcdException as exc:
                    raise self._unavailable("write", child, exc) from exc

        self._log.debug("Seeded %d etcd keys under %s", len(entries), path)
        return CipProperties(identity, entries)


def _direct_leaves(path: str, result: etcd.EtcdResult) -> dict[str, str]:
    """Leaf values directly below *path*; nested directories are skipped.

    A classified set lives one level below its unclassified sibling, so only
    direct children belong to the set being read.
    """
    prefix = f"/{path}/"
    entries: dict[str, str] = {}
    for node in result.leaves:
        if node.dir or not node.key.startswith(prefix):
            continue
        name = node.key[len(prefix):]
        if "/" in name:
            continue
        entries[name] = node.value if node.value is not None else ""
    return entries
