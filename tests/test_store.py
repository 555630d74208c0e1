import threading

import pytest

from steam_watch.models import WatchRecord, fingerprint
from steam_watch.store import ChangeCache, InvalidInput, WatchRegistry, is_absolute_url

PAGE = "https://a.test/p"
CALLBACK = "https://cb.test/h"


def test_register_is_idempotent_and_first_token_wins():
    registry = WatchRegistry()

    assert registry.register(PAGE, CALLBACK, "t1") is True
    assert registry.register(PAGE, CALLBACK, "t2") is True

    records = registry.snapshot()
    assert records == [WatchRecord(target=PAGE, token="t1", callback=CALLBACK)]


def test_fingerprint_ignores_token():
    a = WatchRecord(target=PAGE, token="t1", callback=CALLBACK)
    b = WatchRecord(target=PAGE, token="t2", callback=CALLBACK)
    assert a.fingerprint == b.fingerprint == fingerprint(PAGE, CALLBACK)


def test_same_page_different_callbacks_are_separate_watches():
    registry = WatchRegistry()
    registry.register(PAGE, CALLBACK, "t1")
    registry.register(PAGE, "https://other.test/h", "t1")
    assert len(registry) == 2


@pytest.mark.parametrize("target, callback", [
    ("not-a-url", CALLBACK),
    (PAGE, "not-a-url"),
    ("", CALLBACK),
    (PAGE, ""),
    ("/relative/path", CALLBACK),
])
def test_register_rejects_malformed_urls(target, callback):
    registry = WatchRegistry()
    with pytest.raises(InvalidInput):
        registry.register(target, callback, "t1")
    assert len(registry) == 0


def test_is_absolute_url():
    assert is_absolute_url("https://steamcommunity.com/id/someone")
    assert is_absolute_url("http://localhost:8080/hook")
    assert not is_absolute_url("steamcommunity.com/id/someone")
    assert not is_absolute_url("http://[::1")
    assert not is_absolute_url(None)


def test_snapshot_is_a_copy():
    registry = WatchRegistry()
    registry.register(PAGE, CALLBACK, "t1")

    records = registry.snapshot()
    registry.register("https://b.test/p", CALLBACK, "t1")

    assert len(records) == 1
    assert len(registry.snapshot()) == 2


def test_update_token_replaces_only_token():
    registry = WatchRegistry()
    registry.register(PAGE, CALLBACK, "t1")
    key = fingerprint(PAGE, CALLBACK)

    registry.update_token(key, "NEW")

    assert registry.get(key) == WatchRecord(target=PAGE, token="NEW", callback=CALLBACK)


def test_update_token_after_eviction_is_noop():
    registry = WatchRegistry()
    registry.register(PAGE, CALLBACK, "t1")
    key = fingerprint(PAGE, CALLBACK)

    registry.evict(key)
    registry.update_token(key, "NEW")

    assert key not in registry
    assert registry.get(key) is None


def test_evict_is_idempotent():
    registry = WatchRegistry()
    registry.register(PAGE, CALLBACK, "t1")
    key = fingerprint(PAGE, CALLBACK)

    registry.evict(key)
    registry.evict(key)

    assert len(registry) == 0


def test_concurrent_registration_never_duplicates():
    registry = WatchRegistry()
    barrier = threading.Barrier(8)

    def worker(n):
        barrier.wait()
        registry.register(PAGE, CALLBACK, f"t{n}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(registry) == 1


def test_change_cache_put_get_evict():
    cache = ChangeCache()
    key = fingerprint(PAGE, CALLBACK)

    assert cache.get(key) is None
    cache.put(key, "a")
    cache.put(key, "b")
    assert cache.get(key) == "b"

    cache.evict(key)
    cache.evict(key)
    assert cache.get(key) is None
    assert len(cache) == 0


def test_surrounding_whitespace_does_not_create_a_second_watch():
    registry = WatchRegistry()
    registry.register(" " + PAGE, CALLBACK + "\n", "t1")
    registry.register(PAGE, CALLBACK, "t2")

    assert registry.snapshot() == [WatchRecord(target=PAGE, token="t1", callback=CALLBACK)]
    assert fingerprint(PAGE, CALLBACK) in registry
