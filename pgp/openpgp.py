"""
Narrow OpenPGP boundary used by the keys cache and the signature checks.

Key rings are parsed and signatures verified by GnuPG through python-gnupg, each
call in a throwaway home directory so the user's own keyring is never touched.
Signature packets are inspected with ``gpg --list-packets``.
"""

import io
import re
import subprocess
import tempfile
from dataclasses import dataclass, field

import gnupg

from utils.exceptions import SignatureFormatError
from utils.logging import log_debug

GPG_BINARY = "gpg"

SIGNATURE_PACKET_PATTERN = re.compile(r":signature packet: algo (\d+), keyid ([0-9A-Fa-f]{16})")
DIGEST_ALGO_PATTERN = re.compile(r"digest algo (\d+)")


@dataclass(frozen=True)
class PublicKey:
    key_id: int
    fingerprint: str
    is_master: bool = False
    user_ids: tuple = ()


@dataclass(frozen=True)
class KeyRing:
    """
    A master key with its sub keys, together with the encoded bytes it was read from.
    """
    keys: tuple
    encoded: bytes = field(default=b"", repr=False)

    def __iter__(self):
        return iter(self.keys)

    def __len__(self):
        return len(self.keys)

    @property
    def master_key(self):
        for key in self.keys:
            if key.is_master:
                return key
        return self.keys[0] if self.keys else None

    def get_public_key(self, key_id):
        for key in self.keys:
            if key.key_id == key_id:
                return key
        return None

    @property
    def user_ids(self):
        master = self.master_key
        return list(master.user_ids) if master else []


@dataclass(frozen=True)
class Signature:
    key_id: int
    hash_algorithm: int
    key_algorithm: int
    encoded: bytes = field(default=b"", repr=False)


def parse_key_id(value):
    return int(value, 16)


def parse_key_ring(data):
    """
    Decodes armored or binary key ring bytes into a KeyRing.

    A payload GnuPG cannot read yields an empty ring.
    """
    with tempfile.TemporaryDirectory(prefix="pgpverify-") as home:
        gpg = gnupg.GPG(gpgbinary=GPG_BINARY, gnupghome=home)
        scanned = gpg.scan_keys_mem(data)

    keys = []
    for entry in scanned:
        user_ids = tuple(entry.get("uids") or ())
        keys.append(PublicKey(
            key_id=parse_key_id(entry["keyid"]),
            fingerprint=(entry.get("fingerprint") or "").upper(),
            is_master=True,
            user_ids=user_ids,
        ))
        for subkey in entry.get("subkeys") or ():
            keys.append(PublicKey(
                key_id=parse_key_id(subkey[0]),
                fingerprint=(subkey[2] if len(subkey) > 2 and subkey[2] else "").upper(),
                user_ids=user_ids,
            ))
    return KeyRing(keys=tuple(keys), encoded=data)


def parse_signatures(data):
    """
    Lists the signature packets of a detached signature.

    Raises SignatureFormatError when no signature packet is present.
    """
    with tempfile.TemporaryDirectory(prefix="pgpverify-") as home:
        result = subprocess.run(
            [GPG_BINARY, "--homedir", home, "--batch", "--list-packets"],
            input=data,
            capture_output=True,
            timeout=10
        )
    output = result.stdout.decode("utf-8", errors="replace")

    signatures = []
    for block in output.split(":signature packet:")[1:]:
        block = ":signature packet:" + block
        packet = SIGNATURE_PACKET_PATTERN.search(block)
        digest = DIGEST_ALGO_PATTERN.search(block)
        if packet is None or digest is None:
            continue
        signatures.append(Signature(
            key_id=parse_key_id(packet.group(2)),
            hash_algorithm=int(digest.group(1)),
            key_algorithm=int(packet.group(1)),
            encoded=data,
        ))

    if not signatures:
        raise SignatureFormatError("No signature packet found")
    return signatures


def verify(signature, key_ring, content_path):
    """
    Checks a detached signature over the file content with the given key ring only.

    An expired key does not invalidate an otherwise good signature.
    """
    with tempfile.TemporaryDirectory(prefix="pgpverify-") as home:
        gpg = gnupg.GPG(gpgbinary=GPG_BINARY, gnupghome=home)
        gpg.import_keys(key_ring.encoded)
        verified = gpg.verify_file(io.BytesIO(signature.encoded), data_filename=str(content_path))

    status = verified.stderr or ""
    log_debug(f"[OpenPGP] gpg status for {content_path}: {verified.status}")
    return bool(verified.valid) or "[GNUPG:] VALIDSIG" in status
