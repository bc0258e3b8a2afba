# repositories/__init__.py

from .maven import (
    MAVEN_CENTRAL_URL,
    artifact_url,
    download_file,
    resolve_artifact,
    resolve_artifacts,
)

__all__ = [
    "MAVEN_CENTRAL_URL",
    "artifact_url",
    "download_file",
    "resolve_artifact",
    "resolve_artifacts",
]
