from enum import Enum

class ArtifactStatus(Enum):
    """
    Enum для обозначения статуса проверки подписи артефакта.
    """
    VALID = "valid"
    INVALID = "invalid"
    ACCEPTED_BROKEN = "accepted_broken"
    ACCEPTED_UNSIGNED = "accepted_unsigned"
    MISSING_KEY_ACCEPTED = "missing_key_accepted"
    SIGNATURE_UNAVAILABLE = "signature_unavailable"
    NOT_SIGNED = "not_signed"
    KEY_NOT_ALLOWED = "key_not_allowed"
    WEAK_SIGNATURE = "weak_signature"
    ERROR = "error"

    @property
    def is_failure(self):
        return self in FAILING_STATUSES


FAILING_STATUSES = frozenset({
    ArtifactStatus.INVALID,
    ArtifactStatus.NOT_SIGNED,
    ArtifactStatus.KEY_NOT_ALLOWED,
    ArtifactStatus.WEAK_SIGNATURE,
    ArtifactStatus.ERROR,
})


def summarize(statuses):
    """
    Counts verdicts by status value, e.g. {"valid": 10, "invalid": 1}.

    Args:
        statuses (iterable): ArtifactStatus values.

    Returns:
        dict: Number of artifacts per status value.
    """
    summary = {}
    for status in statuses:
        summary[status.value] = summary.get(status.value, 0) + 1
    return summary
