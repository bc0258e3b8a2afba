from artifact.artifact_status import ArtifactStatus, summarize
from artifact.signature_verification import SignatureVerifier
from keyserver.cache import PGPKeysCache
from keysmap.keys_map import KeysMap
from utils.exceptions import SignatureCheckError
from utils.logging import log_debug, log_error, log_info


def prepare_for_keys(config):
    """
    Creates the keys cache and loads the keys map for a run.

    Args:
        config (Configuration): Run configuration.

    Returns:
        tuple: (PGPKeysCache, KeysMap)
    """
    keys_cache = PGPKeysCache.from_key_servers(
        config.keys_cache_path,
        config.key_servers,
        config.load_balance,
        proxy=config.proxy,
        connect_timeout=config.connect_timeout,
        read_timeout=config.read_timeout,
        max_retries=config.max_retries,
    )
    keys_map = KeysMap()
    keys_map.load(config.keys_map_location)
    return keys_cache, keys_map


def create_verifier(config, keys_cache, keys_map):
    return SignatureVerifier(
        keys_cache,
        keys_map,
        signature_requirement=config.signature_requirement,
        fail_weak_signature=config.fail_weak_signature,
    )


def verify_artifacts(verifier, artifacts_to_signatures):
    """
    Verifies every artifact, never stopping at the first failure.

    Args:
        verifier (SignatureVerifier): Decision engine.
        artifacts_to_signatures (dict): Artifact -> signature file path or None.

    Returns:
        dict: Artifact -> ArtifactStatus, in input order.
    """
    results = {}
    for artifact, signature_file in artifacts_to_signatures.items():
        status = verifier.verify_artifact(artifact, signature_file)
        log_debug(f"[Verification] {artifact.id}: {status.value}")
        results[artifact] = status
    return results


def mark_unresolved(artifacts):
    """
    Gives every artifact that could not be downloaded an ERROR verdict.
    """
    results = {}
    for artifact in artifacts:
        log_error(f"{artifact.id} could not be resolved, PGP signature not checked")
        results[artifact] = ArtifactStatus.ERROR
    return results


def check_artifacts(verifier, artifacts_to_signatures):
    """
    Verifies all artifacts and raises SignatureCheckError if any verdict is failing.
    """
    return raise_for_failures(verify_artifacts(verifier, artifacts_to_signatures))


def raise_for_failures(results):
    log_info(f"[Verification] Summary: {summarize(results.values())}")

    failed = [artifact for artifact, status in results.items() if status.is_failure]
    if failed:
        log_error(f"[Verification] {len(failed)} of {len(results)} artifacts failed the PGP signature check")
        raise SignatureCheckError("PGP signature error")
    return results


def results_to_report(results):
    """
    Converts verdicts into JSON-serializable dictionaries.
    """
    return [
        {
            "artifact": artifact.id,
            "signature": status.value,
            "failed": status.is_failure,
        }
        for artifact, status in results.items()
    ]
