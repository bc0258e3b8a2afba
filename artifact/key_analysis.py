from keyserver.client import format_key_id


def fingerprint_for_master(public_key, key_ring):
    """
    Returns the fingerprint of the master key of the ring, or of the key itself
    when the ring has no master.
    """
    master = key_ring.master_key if key_ring is not None else None
    key = master or public_key
    return f"0x{key.fingerprint}" if key.fingerprint else format_key_id(key.key_id)


def key_id_description(public_key, key_ring):
    """
    Describes the signing key, naming the master key as well when a sub key signed.

    Args:
        public_key (PublicKey): Key that made the signature.
        key_ring (KeyRing): Ring the key was found in.

    Returns:
        str: Description such as "SubKeyId: 0x... of 0x..." or "KeyId: 0x...".
    """
    master = key_ring.master_key if key_ring is not None else None
    if master is not None and master.key_id != public_key.key_id:
        return f"SubKeyId: {format_key_id(public_key.key_id)} of {fingerprint_for_master(public_key, key_ring)}"
    return f"KeyId: {format_key_id(public_key.key_id)}"


def get_user_ids(public_key, key_ring):
    """
    User IDs of the master key, falling back to the ones on the key itself.
    """
    master = key_ring.master_key if key_ring is not None else None
    user_ids = list(master.user_ids) if master is not None else []
    return user_ids or list(public_key.user_ids)
