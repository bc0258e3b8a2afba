import os
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from fakes import (
    MASTER_FINGERPRINT,
    MASTER_KEY_ID,
    RING_PAYLOAD,
    SUB_KEY_ID,
    FakeKeyServerClient,
    encode_ring,
    parse_fake_ring,
)
from keyserver.cache import PGPKeysCache, cache_file_name
from keyserver.client import HKPSKeyServerClient
from keyserver.server_list import KeyServerListFallback, KeyServerListLoadBalance, KeyServerListOne
from utils.exceptions import CacheIOError, ConfigurationError, KeyNotFoundError, KeyServerError


def _cache(path, clients, load_balance=True):
    return PGPKeysCache(path, clients, load_balance, key_ring_parser=parse_fake_ring)


def test_cache_file_name_is_fixed_width_lower_case_hex():
    assert cache_file_name(MASTER_KEY_ID) == "efe8086f9e93774e"
    assert cache_file_name(0x1234567890) == "0000001234567890"


def test_empty_cache_dir_is_created(tmp_path, ring_client):
    cache_path = tmp_path / "empty" / "nested"
    assert not cache_path.exists()

    _cache(cache_path, [ring_client])

    assert cache_path.is_dir()


def test_file_as_cache_dir_raises(tmp_path, ring_client):
    cache_path = tmp_path / "file.tmp"
    cache_path.touch()

    with pytest.raises(ConfigurationError, match="^PGP keys cache path exist but is not a directory:"):
        _cache(cache_path, [ring_client])


@pytest.mark.parametrize(
    "count, load_balance, expected",
    [
        (1, True, KeyServerListOne),
        (2, True, KeyServerListLoadBalance),
        (2, False, KeyServerListFallback),
    ],
)
def test_cache_builds_server_list_from_clients(tmp_path, count, load_balance, expected):
    clients = [FakeKeyServerClient(f"client{i}") for i in range(count)]

    keys_cache = _cache(tmp_path, clients, load_balance)

    assert type(keys_cache.key_server_list) is expected


def test_get_key_from_server_then_from_cache(tmp_path, ring_client):
    keys_cache = _cache(tmp_path, [ring_client])

    key_ring = keys_cache.get_key_ring(MASTER_KEY_ID)

    assert len(key_ring) == 2
    assert key_ring.get_public_key(MASTER_KEY_ID) is not None
    assert ring_client.copy_calls == [MASTER_KEY_ID]
    assert os.listdir(tmp_path) == ["efe8086f9e93774e"]
    assert (tmp_path / "efe8086f9e93774e").read_bytes() == RING_PAYLOAD

    key_ring = keys_cache.get_key_ring(MASTER_KEY_ID)

    assert len(key_ring) == 2
    assert ring_client.copy_calls == [MASTER_KEY_ID]


def test_cache_survives_new_instance(tmp_path, ring_client):
    _cache(tmp_path, [ring_client]).get_key_ring(MASTER_KEY_ID)
    other_client = FakeKeyServerClient("other", payload=RING_PAYLOAD)

    key_ring = _cache(tmp_path, [other_client]).get_key_ring(MASTER_KEY_ID)

    assert key_ring.get_public_key(MASTER_KEY_ID).fingerprint == MASTER_FINGERPRINT
    assert other_client.copy_calls == []


def test_sub_key_is_found_in_ring(tmp_path, ring_client):
    keys_cache = _cache(tmp_path, [ring_client])

    key_ring = keys_cache.get_key_ring(SUB_KEY_ID)

    assert key_ring.get_public_key(SUB_KEY_ID) is not None
    assert key_ring.master_key.key_id == MASTER_KEY_ID
    assert (tmp_path / cache_file_name(SUB_KEY_ID)).exists()


def test_pre_populated_cache_is_used_without_network(tmp_path, ring_client):
    (tmp_path / "efe8086f9e93774e").write_bytes(RING_PAYLOAD)
    keys_cache = _cache(tmp_path, [ring_client])

    key_ring = keys_cache.get_key_ring(MASTER_KEY_ID)

    assert key_ring.get_public_key(MASTER_KEY_ID) is not None
    assert ring_client.copy_calls == []


def test_non_existing_key_in_ring_raises(tmp_path, ring_client):
    keys_cache = _cache(tmp_path, [ring_client])

    with pytest.raises(KeyNotFoundError, match="^Can't find public key 0x0000001234567890 in download file:"):
        keys_cache.get_key_ring(0x1234567890)


def test_key_not_found_on_server_propagates(tmp_path):
    client = FakeKeyServerClient("client", error=KeyNotFoundError("HTTP 404"))
    keys_cache = _cache(tmp_path, [client])

    with pytest.raises(KeyNotFoundError):
        keys_cache.get_key_ring(MASTER_KEY_ID)

    assert os.listdir(tmp_path) == []


def test_all_servers_failed_keeps_last_cause(tmp_path):
    client1 = FakeKeyServerClient("client1", error=KeyServerError("first"))
    client2 = FakeKeyServerClient("client2", error=KeyNotFoundError("second"))
    keys_cache = _cache(tmp_path, [client1, client2], load_balance=False)

    with pytest.raises(KeyServerError) as exc_info:
        keys_cache.get_key_ring(MASTER_KEY_ID)

    assert isinstance(exc_info.value.__cause__, KeyNotFoundError)
    assert os.listdir(tmp_path) == []


def test_fallback_server_payload_is_cached(tmp_path):
    client1 = FakeKeyServerClient("client1", error=KeyServerError("down"))
    client2 = FakeKeyServerClient("client2", payload=encode_ring((MASTER_KEY_ID, MASTER_FINGERPRINT)))
    keys_cache = _cache(tmp_path, [client1, client2], load_balance=False)

    key_ring = keys_cache.get_key_ring(MASTER_KEY_ID)

    assert len(key_ring) == 1
    assert client1.copy_calls == [MASTER_KEY_ID]
    assert client2.copy_calls == [MASTER_KEY_ID]
    assert (tmp_path / "efe8086f9e93774e").exists()


def test_url_for_show_key_uses_key_server(tmp_path, ring_client):
    keys_cache = _cache(tmp_path, [ring_client])

    url = keys_cache.get_url_for_show_key(MASTER_KEY_ID)

    assert url == "https://keys.example.com/pks/lookup?op=vindex&search=0xEFE8086F9E93774E"
    assert ring_client.copy_calls == []


def test_from_key_servers_creates_clients(tmp_path):
    keys_cache = PGPKeysCache.from_key_servers(tmp_path, ["hkps://keyserver.ubuntu.com"], True)

    assert type(keys_cache.key_server_list) is KeyServerListOne
    assert isinstance(keys_cache.key_server_list.clients[0], HKPSKeyServerClient)
    assert keys_cache.get_url_for_show_key(MASTER_KEY_ID) == (
        "https://keyserver.ubuntu.com/pks/lookup?op=vindex&fingerprint=on&search=0xEFE8086F9E93774E")


class BarrierClient(FakeKeyServerClient):
    """Holds every fetch until all racing callers are inside copy_key_to."""

    def __init__(self, parties):
        super().__init__("keys.example.com", payload=RING_PAYLOAD)
        self.barrier = threading.Barrier(parties, timeout=5)

    def copy_key_to(self, key_id, output, on_retry=None):
        self.barrier.wait()
        output.write(self.payload[:10])
        output.write(self.payload[10:])


def test_concurrent_fetch_of_same_key_leaves_one_complete_file(tmp_path):
    parties = 4
    client = BarrierClient(parties)
    caches = [_cache(tmp_path, [client]) for _ in range(parties)]

    with ThreadPoolExecutor(max_workers=parties) as executor:
        rings = list(executor.map(lambda keys_cache: keys_cache.get_key_ring(MASTER_KEY_ID), caches))

    assert all(ring.get_public_key(MASTER_KEY_ID) is not None for ring in rings)
    assert os.listdir(tmp_path) == ["efe8086f9e93774e"]
    assert (tmp_path / "efe8086f9e93774e").read_bytes() == RING_PAYLOAD


def test_failed_cache_write_leaves_no_partial_file(tmp_path, ring_client, monkeypatch):
    def failing_replace(source, target):
        raise OSError("disk full")

    monkeypatch.setattr("utils.file_operations.os.replace", failing_replace)
    keys_cache = _cache(tmp_path, [ring_client])

    with pytest.raises(CacheIOError, match="disk full"):
        keys_cache.get_key_ring(MASTER_KEY_ID)

    assert os.listdir(tmp_path) == []
