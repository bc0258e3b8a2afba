import threading

from utils.exceptions import ConfigurationError, KeyServerError
from utils.logging import log_warning

ALL_SERVERS_FAILED = "All servers from list failed"


class KeyServerList:
    """
    Runs an operation against one of the configured key server clients.

    The operation receives a client and either returns or raises. Which client is
    tried first, and whether failures move on to the next one, is up to the subclass.
    """

    def __init__(self, clients=None):
        self.clients = []
        if clients is not None:
            self.with_clients(clients)

    def with_clients(self, clients):
        clients = list(clients)
        if not clients:
            raise ConfigurationError("Key server list requires at least one client")
        self.clients = clients
        return self

    def execute(self, operation):
        raise NotImplementedError

    def get_uri_for_show_key(self, key_id):
        raise NotImplementedError

    def _try_in_order(self, operation, indexes):
        """
        Tries the clients at the given positions until one succeeds.

        Returns the position of the successful client. When all fail, raises a
        KeyServerError chained to the last failure.
        """
        last_error = None
        for index in indexes:
            client = self.clients[index]
            try:
                operation(client)
                return index
            except (KeyServerError, OSError) as e:
                last_error = e
                log_warning(f"[Key Server] {client!r} failed: {e}")
        raise KeyServerError(ALL_SERVERS_FAILED) from last_error


class KeyServerListOne(KeyServerList):
    """Always uses the first client, failures propagate as they are."""

    def execute(self, operation):
        operation(self.clients[0])

    def get_uri_for_show_key(self, key_id):
        return self.clients[0].get_uri_for_show_key(key_id)


class KeyServerListFallback(KeyServerList):
    """Starts every call at the first client and falls back to the next ones in order."""

    def __init__(self, clients=None):
        self._last_client = None
        super().__init__(clients)

    def with_clients(self, clients):
        super().with_clients(clients)
        self._last_client = self.clients[0]
        return self

    def execute(self, operation):
        index = self._try_in_order(operation, range(len(self.clients)))
        self._last_client = self.clients[index]

    def get_uri_for_show_key(self, key_id):
        return self._last_client.get_uri_for_show_key(key_id)


class KeyServerListLoadBalance(KeyServerList):
    """
    Spreads calls round-robin over the clients.

    Each call starts at the client after the one used by the previous call and walks
    the whole list on failures. The cursor is guarded by a lock; the operation itself
    runs outside of it.
    """

    def __init__(self, clients=None):
        self._lock = threading.Lock()
        self._current = 0
        self._next = 0
        super().__init__(clients)

    def with_clients(self, clients):
        super().with_clients(clients)
        with self._lock:
            self._current = 0
            self._next = 0
        return self

    def execute(self, operation):
        count = len(self.clients)
        with self._lock:
            start = self._next
            self._next = (start + 1) % count

        index = self._try_in_order(operation, [(start + i) % count for i in range(count)])

        with self._lock:
            self._current = index
            self._next = (index + 1) % count

    def get_uri_for_show_key(self, key_id):
        with self._lock:
            client = self.clients[self._current]
        return client.get_uri_for_show_key(key_id)


def create_key_server_list(clients, load_balance):
    """
    Chooses the server list strategy: one client always gets KeyServerListOne,
    several clients get round-robin or fallback depending on load_balance.
    """
    clients = list(clients)
    if len(clients) == 1:
        server_list = KeyServerListOne()
    elif load_balance:
        server_list = KeyServerListLoadBalance()
    else:
        server_list = KeyServerListFallback()
    return server_list.with_clients(clients)
