import io
import os
import threading

from keyserver.client import create_client, format_key_id
from keyserver.server_list import create_key_server_list
from pgp.openpgp import parse_key_ring
from utils.exceptions import CacheIOError, ConfigurationError, KeyNotFoundError
from utils.file_operations import ensure_directory, load_file_content, save_file_atomic
from utils.logging import log_debug, log_info, log_warning


def cache_file_name(key_id):
    """
    Cache entries are named by the key id as 16 lower case hex digits.
    """
    return f"{key_id & 0xFFFFFFFFFFFFFFFF:016x}"


class PGPKeysCache:
    """
    Directory-backed cache of public key rings, keyed by the 64-bit key id.

    A missing entry is fetched once through the key server list and kept on disk for
    good; entries never expire. Rings are also remembered for the life of the object.
    """

    def __init__(self, cache_path, key_server_clients, load_balance, key_ring_parser=parse_key_ring):
        self.cache_path = os.fspath(cache_path)
        try:
            ensure_directory(self.cache_path)
        except NotADirectoryError as e:
            raise ConfigurationError(
                f"PGP keys cache path exist but is not a directory: {self.cache_path}") from e
        except OSError as e:
            raise CacheIOError(f"Can't create PGP keys cache directory {self.cache_path}: {e}") from e

        self.key_server_list = create_key_server_list(key_server_clients, load_balance)
        self.key_ring_parser = key_ring_parser
        self._rings = {}
        self._lock = threading.Lock()

    @classmethod
    def from_key_servers(cls, cache_path, key_servers, load_balance, proxy=None, **client_options):
        """
        Builds the cache for key server addresses such as hkps://keyserver.ubuntu.com.
        """
        clients = [create_client(key_server, proxy=proxy, **client_options) for key_server in key_servers]
        return cls(cache_path, clients, load_balance)

    def get_url_for_show_key(self, key_id):
        return self.key_server_list.get_uri_for_show_key(key_id)

    def get_key_ring(self, key_id):
        """
        Returns the key ring holding key_id, from the cache or from a key server.

        Raises KeyNotFoundError when the ring does not contain the requested key.
        """
        with self._lock:
            ring = self._rings.get(key_id)
        if ring is not None:
            return ring

        key_file = os.path.join(self.cache_path, cache_file_name(key_id))
        try:
            content = load_file_content(key_file)
        except OSError as e:
            raise CacheIOError(f"Can't read cached key {key_file}: {e}") from e

        if content is None:
            content = self._fetch(key_id, key_file)
        else:
            log_debug(f"[Key Cache] Key {format_key_id(key_id)} found in cache {key_file}")

        ring = self.key_ring_parser(content)
        if ring.get_public_key(key_id) is None:
            raise KeyNotFoundError(f"Can't find public key {format_key_id(key_id)} in download file: {key_file}")

        with self._lock:
            self._rings[key_id] = ring
        return ring

    def _fetch(self, key_id, key_file):
        buffer = io.BytesIO()

        def on_retry(address, attempt, wait, error):
            log_warning(f"[Key Cache] [Retry #{attempt} waiting: {wait}s] Last address {address} "
                        f"with problem: {error}")

        def fetch(client):
            buffer.seek(0)
            buffer.truncate()
            log_info(f"[Key Cache] Fetching key {format_key_id(key_id)} from {client!r}")
            client.copy_key_to(key_id, buffer, on_retry)

        self.key_server_list.execute(fetch)

        content = buffer.getvalue()
        try:
            save_file_atomic(key_file, content)
        except (OSError, ValueError) as e:
            raise CacheIOError(f"Can't store key {format_key_id(key_id)} in {key_file}: {e}") from e
        return content
