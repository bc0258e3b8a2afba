# keyserver/__init__.py

from .cache import PGPKeysCache
from .client import (
    KeyServerClient,
    HKPKeyServerClient,
    HKPSKeyServerClient,
    create_client,
    format_key_id,
)
from .server_list import (
    KeyServerList,
    KeyServerListOne,
    KeyServerListFallback,
    KeyServerListLoadBalance,
    create_key_server_list,
)

__all__ = [
    "PGPKeysCache",
    "KeyServerClient",
    "HKPKeyServerClient",
    "HKPSKeyServerClient",
    "create_client",
    "format_key_id",
    "KeyServerList",
    "KeyServerListOne",
    "KeyServerListFallback",
    "KeyServerListLoadBalance",
    "create_key_server_list",
]
