import subprocess

from artifact.artifact_status import ArtifactStatus
from artifact.key_analysis import fingerprint_for_master, get_user_ids, key_id_description
from pgp.openpgp import parse_signatures, verify
from utils.config import SignatureRequirement
from utils.exceptions import (
    CacheIOError,
    ConfigurationError,
    KeyNotFoundError,
    KeyServerError,
    PGPVerifyError,
    SignatureFormatError,
    find_cause,
)
from utils.file_operations import load_file_content
from utils.logging import log_debug, log_error, log_result, log_warning

# Хэш-алгоритмы OpenPGP (RFC 4880, 9.4), которые считаются слабыми
WEAK_SIGNATURES = {
    1: "MD5",
    4: "DOUBLE_SHA",
    5: "MD2",
    6: "TIGER_192",
    7: "HAVAL_5_160",
    11: "SHA224",
}

PGP_VERIFICATION_RESULT_FORMAT = "{} PGP Signature {}\n       {} UserIds: {}"


def artifact_key(artifact):
    return f"{artifact.group_id}:{artifact.artifact_id}:{artifact.version}"


class SignatureVerifier:
    """
    Decides the verdict for one artifact from its signature file, the keys cache
    and the keys map.

    The keys map is consulted only after the raw outcome is known; it can turn an
    unavailable signature, a broken signature or a key missing on the server into a
    pass. Configuration and cache errors are re-raised, any other failure becomes an
    ERROR verdict for that artifact alone.
    """

    def __init__(self, keys_cache, keys_map, signature_requirement=SignatureRequirement.NONE,
                 fail_weak_signature=False, signature_parser=parse_signatures, verifier=verify):
        self.keys_cache = keys_cache
        self.keys_map = keys_map
        self.signature_requirement = signature_requirement
        self.fail_weak_signature = fail_weak_signature
        self.signature_parser = signature_parser
        self.verifier = verifier

    def verify_artifact(self, artifact, signature_file):
        if signature_file is None:
            return self.verify_signature_unavailable(artifact)

        log_debug(f"[Signature Verification] Artifact file: {artifact.file}")
        log_debug(f"[Signature Verification] Artifact sign: {signature_file}")
        try:
            return self._verify_signature(artifact, signature_file)
        except (ConfigurationError, CacheIOError):
            raise
        except KeyServerError as e:
            if find_cause(e, KeyNotFoundError) is not None and self.keys_map.is_key_missing(artifact):
                log_result(f"{artifact.id} PGP Key not found on server, consistent with keys map.")
                return ArtifactStatus.MISSING_KEY_ACCEPTED
            log_error(f"Failed to process signature '{signature_file}' for artifact {artifact.id}: "
                      f"{_describe(e)}")
            return ArtifactStatus.ERROR
        except (PGPVerifyError, OSError, subprocess.SubprocessError) as e:
            log_error(f"Failed to process signature '{signature_file}' for artifact {artifact.id}: {e}")
            return ArtifactStatus.ERROR

    def verify_signature_unavailable(self, artifact):
        """
        Verdict for an artifact without a signature file.
        """
        if self.signature_requirement is SignatureRequirement.REQUIRED:
            log_error(f"Unsigned artifact: {artifact.id}")
            return ArtifactStatus.NOT_SIGNED

        if self.keys_map.is_no_signature(artifact):
            log_result(f"{artifact.id} PGP Signature unavailable, consistent with keys map.")
            return ArtifactStatus.ACCEPTED_UNSIGNED

        if self.signature_requirement is SignatureRequirement.STRICT:
            log_error(f"Unsigned artifact not listed in keys map: {artifact.id}")
            return ArtifactStatus.NOT_SIGNED

        log_warning(f"{artifact.id} PGP Signature unavailable")
        return ArtifactStatus.SIGNATURE_UNAVAILABLE

    def _verify_signature(self, artifact, signature_file):
        content = load_file_content(signature_file)
        if not content:
            raise SignatureFormatError(f"Invalid signature file: {signature_file}")

        signature = self.signature_parser(content)[0]

        weak_algorithm = WEAK_SIGNATURES.get(signature.hash_algorithm)
        if weak_algorithm is not None:
            message = f"{artifact.id} Weak signature algorithm used: {weak_algorithm}"
            if self.fail_weak_signature:
                log_error(message)
                return ArtifactStatus.WEAK_SIGNATURE
            log_warning(message)

        key_ring = self.keys_cache.get_key_ring(signature.key_id)
        public_key = key_ring.get_public_key(signature.key_id)

        if not self.keys_map.is_valid_key(artifact, public_key, key_ring):
            rule = f"{artifact_key(artifact)} = {fingerprint_for_master(public_key, key_ring)}"
            key_url = self.keys_cache.get_url_for_show_key(public_key.key_id)
            log_error(f"Not allowed artifact {artifact.id} and keyID:\n\t{rule}\n\t{key_url}")
            return ArtifactStatus.KEY_NOT_ALLOWED

        log_debug(f"[Signature Verification] signature.KeyAlgorithm: {signature.key_algorithm} "
                  f"signature.hashAlgorithm: {signature.hash_algorithm}")

        signature_status = self.verifier(signature, key_ring, artifact.file)
        return self._verify_signature_status(signature_status, artifact, public_key, key_ring)

    def _verify_signature_status(self, signature_status, artifact, public_key, key_ring):
        description = key_id_description(public_key, key_ring)
        user_ids = get_user_ids(public_key, key_ring)

        if signature_status:
            log_result(PGP_VERIFICATION_RESULT_FORMAT.format(artifact.id, "OK", description, user_ids))
            return ArtifactStatus.VALID

        if self.keys_map.is_broken_signature(artifact):
            log_result(f"{artifact.id} PGP Signature is broken, consistent with keys map.")
            return ArtifactStatus.ACCEPTED_BROKEN

        log_error(PGP_VERIFICATION_RESULT_FORMAT.format(artifact.id, "INVALID", description, user_ids))
        return ArtifactStatus.INVALID


def _describe(error):
    """
    Joins the messages of an error and its causes.
    """
    messages = []
    while error is not None:
        messages.append(str(error))
        error = error.__cause__
    return ": ".join(messages)
