import time
from urllib.parse import urlencode, urlsplit, urlunsplit

import requests
from requests.exceptions import RequestException

from utils.exceptions import ConfigurationError, KeyNotFoundError, KeyServerError
from utils.logging import log_debug

LOOKUP_PATH = "/pks/lookup"


def format_key_id(key_id):
    """
    Renders a key id as 0x followed by 16 upper case hex digits.
    """
    return f"0x{key_id & 0xFFFFFFFFFFFFFFFF:016X}"


class KeyServerClient:
    """
    Fetches public keys from one HKP key server.

    Subclasses only decide the transport scheme and the default port.
    """

    scheme = None
    scheme_port = None
    default_port = None

    def __init__(self, host, port=None, proxy=None, connect_timeout=10.0, read_timeout=20.0,
                 max_retries=3, retry_wait=0.5, session=None):
        self.host = host
        self.port = port
        self.proxy = proxy
        self.timeout = (connect_timeout, read_timeout)
        self.max_retries = max_retries
        self.retry_wait = retry_wait
        self.session = session or requests.Session()
        if proxy is not None:
            self.session.proxies.update(proxy.to_requests_proxies())

    def __repr__(self):
        return f"{type(self).__name__}({self.address})"

    @property
    def address(self):
        if self.port and self.port != self.scheme_port:
            return f"{self.host}:{self.port}"
        return self.host

    def _lookup_uri(self, params):
        return urlunsplit((self.scheme, self.address, LOOKUP_PATH, urlencode(params, safe=","), ""))

    def get_uri_for_get_key(self, key_id):
        return self._lookup_uri([("op", "get"), ("options", "mr"), ("search", format_key_id(key_id))])

    def get_uri_for_show_key(self, key_id):
        return self._lookup_uri([("op", "vindex"), ("fingerprint", "on"), ("search", format_key_id(key_id))])

    def copy_key_to(self, key_id, output, on_retry=None):
        """
        Downloads the key ring for key_id and writes the raw bytes to output.

        Transient failures are retried; on_retry(address, attempt, wait, error) is
        called before each retry. An unknown key raises KeyNotFoundError straight away.
        """
        uri = self.get_uri_for_get_key(key_id)
        wait = self.retry_wait
        attempt = 0
        while True:
            try:
                content = self._get(uri, key_id)
                output.write(content)
                return
            except KeyNotFoundError:
                raise
            except KeyServerError as e:
                if attempt >= self.max_retries:
                    raise
                attempt += 1
                if on_retry is not None:
                    on_retry(self.address, attempt, wait, e)
                if wait:
                    time.sleep(wait)
                wait *= 2

    def _get(self, uri, key_id):
        log_debug(f"[Key Server] Requesting {uri}")
        try:
            response = self.session.get(uri, timeout=self.timeout)
        except RequestException as e:
            raise KeyServerError(f"Connection to {self.address} failed: {e}") from e

        if response.status_code == 404:
            raise KeyNotFoundError(
                f"PGP server returned an error: HTTP {response.status_code} for: {uri} (key {format_key_id(key_id)})")
        if response.status_code >= 400:
            raise KeyServerError(f"PGP server returned an error: HTTP {response.status_code} for: {uri}")
        if not response.content:
            raise KeyServerError(f"PGP server returned an empty response for: {uri}")
        return response.content


class HKPKeyServerClient(KeyServerClient):
    scheme = "http"
    scheme_port = 80
    default_port = 11371

    def __init__(self, host, port=None, **kwargs):
        super().__init__(host, port or self.default_port, **kwargs)


class HKPSKeyServerClient(KeyServerClient):
    scheme = "https"
    scheme_port = 443
    default_port = 443

    def __init__(self, host, port=None, **kwargs):
        super().__init__(host, port or self.default_port, **kwargs)


CLIENT_TYPES = {
    "hkp": HKPKeyServerClient,
    "http": HKPKeyServerClient,
    "hkps": HKPSKeyServerClient,
    "https": HKPSKeyServerClient,
}


def create_client(key_server, proxy=None, **kwargs):
    """
    Creates the client for a key server address such as hkps://keyserver.ubuntu.com.
    """
    parts = urlsplit(key_server)
    client_type = CLIENT_TYPES.get(parts.scheme.lower())
    if client_type is None:
        raise ConfigurationError(f"Unsupported protocol: {parts.scheme} in key server address {key_server}")
    if not parts.hostname:
        raise ConfigurationError(f"Invalid key server address: {key_server}")

    try:
        port = parts.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid key server address: {key_server}") from e
    if port is None and parts.scheme.lower() == "http":
        port = 80
    return client_type(parts.hostname, port, proxy=proxy, **kwargs)
