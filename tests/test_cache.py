"""Unit tests for SecretCache."""
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from conftest import FakeResolver, make_vault

from discretion.cache import SecretCache
from discretion.events import EventQueue, ResolutionFinished, ResolutionStarted
from discretion.models import SecretInfo, SecretRecord


def _record(name: str, version: str = "v1", vault: str = "kv-payments") -> SecretRecord:
    return SecretRecord.from_listing(make_vault(vault), SecretInfo(name, version))


@pytest.fixture
def events():
    return EventQueue()


@pytest.fixture
def cache(resolver, events):
    c = SecretCache(resolver, events=events, max_workers=2)
    yield c
    c.shutdown()


def test_unknown_identifier_is_not_found_and_skips_backend(cache, resolver, events):
    value, found = cache.resolve("https://kv-gone.vault.azure.net/secrets/x/v1")

    assert (value, found) == ("", False)
    assert resolver.calls == []
    finished = events.drain()
    assert len(finished) == 1
    assert isinstance(finished[0], ResolutionFinished)
    assert finished[0].found is False


def test_resolve_stores_value_and_reports_progress(cache, resolver, events):
    record = _record("db-password", "v3")
    cache.replace([record])

    value, found = cache.resolve(record.identifier)

    assert (value, found) == ("value-of-db-password", True)
    assert resolver.calls == [("https://kv-payments.vault.azure.net", "db-password", "v3")]
    assert cache.get(record.identifier).resolved_value == "value-of-db-password"
    started, finished = events.drain()
    assert isinstance(started, ResolutionStarted)
    assert started.name == "db-password"
    assert finished.ok
    assert finished.value == "value-of-db-password"


def test_backend_failure_returns_empty_but_found(events):
    resolver = FakeResolver(failing={"db-password"})
    cache = SecretCache(resolver, events=events, max_workers=1)
    record = _record("db-password")
    cache.replace([record])

    try:
        value, found = cache.resolve(record.identifier)
    finally:
        cache.shutdown()

    assert (value, found) == ("", True)
    assert cache.get(record.identifier).resolved_value == ""
    finished = events.drain()[-1]
    assert finished.found is True
    assert finished.error is not None
    assert not finished.ok


def test_unexpected_backend_exception_is_contained(events):
    class Exploding:
        def resolve(self, vault_url, name, version):
            raise RuntimeError("socket closed")

    cache = SecretCache(Exploding(), events=events, max_workers=1)
    record = _record("db-password")
    cache.replace([record])
    try:
        assert cache.resolve(record.identifier) == ("", True)
    finally:
        cache.shutdown()
    assert events.drain()[-1].error == "socket closed"


def test_replace_discards_previous_entries(cache):
    old = _record("old-token")
    new = _record("new-token")
    cache.replace([old])
    cache.replace([new])

    assert old.identifier not in cache
    assert new.identifier in cache
    assert len(cache) == 1


def test_resolution_racing_a_refresh_does_not_write_back(events):
    record = _record("db-password")
    fresh = _record("db-password")

    class RefreshingResolver:
        def __init__(self):
            self.cache = None

        def resolve(self, vault_url, name, version):
            # A refresh lands while the request is in flight.
            self.cache.replace([fresh])
            return "stale"

    resolver = RefreshingResolver()
    cache = SecretCache(resolver, events=events, max_workers=1)
    resolver.cache = cache
    cache.replace([record])

    try:
        value, found = cache.resolve(record.identifier)
    finally:
        cache.shutdown()

    assert (value, found) == ("stale", True)
    assert cache.get(record.identifier) is fresh
    assert cache.get(record.identifier).resolved_value == ""


def test_resolve_async_runs_in_background(cache):
    record = _record("grafana-admin", vault="kv-platform")
    cache.replace([record])

    future = cache.resolve_async(record.identifier)

    assert future.result(timeout=5) == ("value-of-grafana-admin", True)
    assert cache.get(record.identifier).resolved_value == "value-of-grafana-admin"


def test_concurrent_resolutions_fetch_independently_and_last_completion_wins(events):
    first_started = threading.Event()
    release_first = threading.Event()

    class OrderedResolver:
        def __init__(self):
            self.calls = 0
            self._lock = threading.Lock()

        def resolve(self, vault_url, name, version):
            with self._lock:
                self.calls += 1
                call = self.calls
            if call == 1:
                first_started.set()
                assert release_first.wait(timeout=5)
                return "from-first-call"
            return "from-second-call"

    resolver = OrderedResolver()
    executor = ThreadPoolExecutor(max_workers=2)
    cache = SecretCache(resolver, events=events, executor=executor)
    record = _record("db-password")
    cache.replace([record])

    try:
        first = cache.resolve_async(record.identifier)
        assert first_started.wait(timeout=5)
        second = cache.resolve_async(record.identifier)
        assert second.result(timeout=5) == ("from-second-call", True)
        assert cache.get(record.identifier).resolved_value == "from-second-call"

        release_first.set()
        assert first.result(timeout=5) == ("from-first-call", True)
    finally:
        executor.shutdown(wait=True)

    assert resolver.calls == 2
    final = cache.get(record.identifier)
    assert final.resolved_value == "from-first-call"
    # Every other field is untouched by the value update.
    assert final.identifier == record.identifier
    assert final.name == record.name
    assert final.version == record.version
    assert final.vault_url == record.vault_url
