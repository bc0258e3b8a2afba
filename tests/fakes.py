from artifact.artifact_info import Artifact
from pgp.openpgp import KeyRing, PublicKey, Signature

MASTER_KEY_ID = 0xEFE8086F9E93774E
SUB_KEY_ID = 0x164BD2247B936711
MASTER_FINGERPRINT = "3E9C9F9C2F5C9B3B6A5D0C5DEFE8086F9E93774E"
SUB_FINGERPRINT = "A9BD6E2C4F3F1A2B3C4D5E6F164BD2247B936711"


class FakeKeyServerClient:
    """Records calls and serves a fixed payload or raises a fixed error."""

    def __init__(self, name="client", payload=b"", error=None):
        self.name = name
        self.payload = payload
        self.error = error
        self.copy_calls = []
        self.show_calls = []

    def __repr__(self):
        return f"FakeKeyServerClient({self.name})"

    def get_uri_for_get_key(self, key_id):
        return f"https://{self.name}/pks/lookup?op=get&search=0x{key_id:016X}"

    def get_uri_for_show_key(self, key_id):
        self.show_calls.append(key_id)
        return f"https://{self.name}/pks/lookup?op=vindex&search=0x{key_id:016X}"

    def copy_key_to(self, key_id, output, on_retry=None):
        self.copy_calls.append(key_id)
        if self.error is not None:
            raise self.error
        if output is not None:
            output.write(self.payload)


def encode_ring(*keys):
    """
    Text encoding understood by parse_fake_ring: one "keyid fingerprint" per line,
    the first line is the master key.
    """
    return "\n".join(f"{key_id:016X} {fingerprint}" for key_id, fingerprint in keys).encode()


def parse_fake_ring(data):
    keys = []
    for index, line in enumerate(data.decode().splitlines()):
        key_id, fingerprint = line.split()
        keys.append(PublicKey(
            key_id=int(key_id, 16),
            fingerprint=fingerprint,
            is_master=index == 0,
            user_ids=("Test User <test@example.com>",),
        ))
    return KeyRing(keys=tuple(keys), encoded=data)


RING_PAYLOAD = encode_ring((MASTER_KEY_ID, MASTER_FINGERPRINT), (SUB_KEY_ID, SUB_FINGERPRINT))


def make_artifact(group_id="test.group", artifact_id="test", version="1.1.1", type="jar", file=None):
    return Artifact(group_id, artifact_id, version, type, file)


def make_signature(key_id=MASTER_KEY_ID, hash_algorithm=8):
    return Signature(key_id=key_id, hash_algorithm=hash_algorithm, key_algorithm=1, encoded=b"sig")


