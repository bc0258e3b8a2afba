import re

from keysmap.version_range import VersionRange
from utils.exceptions import ConfigurationError

PACKAGING_PATTERN = re.compile(r"^[a-zA-Z]+$")
DEFAULT_TYPE = "jar"


def _wildcard_regex(value):
    return ".*".join(re.escape(part) for part in value.split("*"))


def _prepare_pattern(value):
    """
    Turns a pattern component into a regex. An empty component matches anything;
    a trailing ".*" matches the prefix itself or any dotted continuation of it.
    """
    if not value:
        return re.compile(".*")
    if value.endswith(".*"):
        return re.compile(_wildcard_regex(value[:-2]) + r"(?:\..*)?")
    return re.compile(_wildcard_regex(value))


def _is_packaging(value):
    return value == "*" or PACKAGING_PATTERN.match(value) is not None


class ArtifactInfo:
    """
    Artifact pattern of a keys map rule: groupId[:artifactId[:type[:version]]].

    With three components the last one is a type when it is a plain word or "*",
    otherwise a version. A missing component matches any value.
    """

    def __init__(self, str_artifact):
        self.definition = str_artifact
        split = [item.strip().lower() for item in str_artifact.split(":")]
        if len(split) > 4 or not split[0]:
            raise ConfigurationError(f"Invalid artifact definition: {str_artifact}")

        group_id = split[0]
        artifact_id = split[1] if len(split) > 1 else ""
        packaging = ""
        version = ""
        if len(split) == 3:
            if _is_packaging(split[2]):
                packaging = split[2]
            else:
                version = split[2]
        elif len(split) == 4:
            packaging = split[2]
            version = split[3]

        # a wildcard version must be the whole component
        if "*" in version and version != "*":
            raise ConfigurationError(f"Invalid artifact definition: {str_artifact}")

        try:
            self.group_id_pattern = _prepare_pattern(group_id)
            self.artifact_id_pattern = _prepare_pattern(artifact_id)
            self.packaging_pattern = _prepare_pattern(packaging)
            self.version_range = VersionRange.parse(version)
        except (ValueError, re.error) as e:
            raise ConfigurationError(f"Invalid artifact definition: {str_artifact}") from e

    def is_match(self, artifact):
        artifact_type = (artifact.type or DEFAULT_TYPE).lower()
        return (
            self.group_id_pattern.fullmatch(artifact.group_id.lower()) is not None
            and self.artifact_id_pattern.fullmatch(artifact.artifact_id.lower()) is not None
            and self.packaging_pattern.fullmatch(artifact_type) is not None
            and self.version_range.contains(artifact.version)
        )

    def is_key_match(self, public_key, key_ring):
        """Artifact patterns never restrict keys, the paired KeyInfo does."""
        return True

    def __repr__(self):
        return f"ArtifactInfo({self.definition!r})"
