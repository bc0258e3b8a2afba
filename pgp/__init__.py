# pgp/__init__.py

from .openpgp import (
    KeyRing,
    PublicKey,
    Signature,
    parse_key_ring,
    parse_signatures,
    verify,
)

__all__ = [
    "KeyRing",
    "PublicKey",
    "Signature",
    "parse_key_ring",
    "parse_signatures",
    "verify",
]
