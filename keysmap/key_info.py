import re

from utils.exceptions import ConfigurationError

NO_SIGNATURE = "nosig"
BROKEN_SIGNATURE = "badsig"
NO_KEY = "nokey"
ANY_KEY = "*"

FINGERPRINT_PATTERN = re.compile(r"^(?:0x)?([0-9a-f]+)$")
FINGERPRINT_LENGTHS = (16, 32, 40, 64)


class KeyInfo:
    """
    The value side of a keys map rule: which keys are accepted for the artifacts
    matched by the pattern, or one of the markers noSig, badSig and noKey.

    An empty value means noSig. Several items may be combined with commas.
    """

    def __init__(self, str_keys):
        self.definition = str_keys
        self.no_signature = False
        self.broken_signature = False
        self.key_missing = False
        self.match_any = False
        self.fingerprints = []

        items = [item.strip() for item in str_keys.split(",")] if str_keys.strip() else [""]
        for item in items:
            self._add_item(item)

    def _add_item(self, item):
        value = item.lower()
        if value in ("", NO_SIGNATURE):
            self.no_signature = True
        elif value == BROKEN_SIGNATURE:
            self.broken_signature = True
        elif value == NO_KEY:
            self.key_missing = True
        elif value == ANY_KEY:
            self.match_any = True
        else:
            match = FINGERPRINT_PATTERN.match(re.sub(r"\s", "", value))
            if match is None or len(match.group(1)) not in FINGERPRINT_LENGTHS:
                raise ConfigurationError(f"Invalid fingerprint or key id: {item}")
            self.fingerprints.append(match.group(1).upper())

    def is_key_match(self, public_key, key_ring):
        """
        Accepts the key when a listed fingerprint or key id matches the key itself
        or the master key of its ring.
        """
        if self.match_any:
            return True
        if public_key is None:
            return False

        candidates = [public_key.fingerprint, f"{public_key.key_id & 0xFFFFFFFFFFFFFFFF:016X}"]
        master = key_ring.master_key if key_ring is not None else None
        if master is not None and master is not public_key:
            candidates += [master.fingerprint, f"{master.key_id & 0xFFFFFFFFFFFFFFFF:016X}"]
        candidates = [fingerprint.upper() for fingerprint in candidates if fingerprint]

        return any(
            candidate.endswith(fingerprint)
            for fingerprint in self.fingerprints
            for candidate in candidates
        )

    def is_no_signature(self):
        return self.no_signature

    def is_broken_signature(self):
        return self.broken_signature

    def is_key_missing(self):
        return self.key_missing

    def __repr__(self):
        return f"KeyInfo({self.definition!r})"
