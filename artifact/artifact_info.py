# artifact/artifact_info.py

from dataclasses import dataclass

DEFAULT_TYPE = "jar"


@dataclass(frozen=True)
class Artifact:
    """
    Maven coordinates of an artifact, with the local file once resolved.
    """
    group_id: str
    artifact_id: str
    version: str
    type: str = DEFAULT_TYPE
    file: str = None

    @property
    def id(self):
        return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.version}"

    @property
    def file_name(self):
        return f"{self.artifact_id}-{self.version}.{self.type}"

    def with_type(self, artifact_type):
        return Artifact(self.group_id, self.artifact_id, self.version, artifact_type)

    def with_file(self, file):
        return Artifact(self.group_id, self.artifact_id, self.version, self.type, file)

    def __str__(self):
        return self.id


def get_artifact_info(artifact):
    """
    Parses an artifact given as group_id:artifact_id:version or
    group_id:artifact_id:packaging:version.

    Args:
        artifact (str): Artifact coordinates.

    Returns:
        Artifact: Parsed coordinates.

    Raises:
        ValueError: When the coordinates have a different shape.
    """
    parts = [part.strip() for part in artifact.strip().split(":")]
    if len(parts) == 3 and all(parts):
        group_id, artifact_id, version = parts
        return Artifact(group_id, artifact_id, version)
    if len(parts) == 4 and all(parts):
        group_id, artifact_id, packaging, version = parts
        return Artifact(group_id, artifact_id, version, packaging)
    raise ValueError(f"Invalid artifact format: {artifact}")
