# artifact/__init__.py

from .artifact_verification import (
    prepare_for_keys,
    create_verifier,
    verify_artifacts,
    check_artifacts,
    mark_unresolved,
    raise_for_failures,
    results_to_report,
)
from .artifact_status import ArtifactStatus, summarize
from .artifact_info import Artifact, get_artifact_info
from .key_analysis import (
    fingerprint_for_master,
    key_id_description,
    get_user_ids,
)
from .signature_verification import SignatureVerifier, WEAK_SIGNATURES

__all__ = [
    "prepare_for_keys",
    "create_verifier",
    "verify_artifacts",
    "check_artifacts",
    "mark_unresolved",
    "raise_for_failures",
    "results_to_report",
    "ArtifactStatus",
    "summarize",
    "Artifact",
    "get_artifact_info",
    "fingerprint_for_master",
    "key_id_description",
    "get_user_ids",
    "SignatureVerifier",
    "WEAK_SIGNATURES",
]
