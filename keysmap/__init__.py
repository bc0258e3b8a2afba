# keysmap/__init__.py

from .artifact_info import ArtifactInfo
from .key_info import KeyInfo
from .keys_map import KeysMap, load_resource
from .version_range import VersionRange, compare_versions, parse_version

__all__ = [
    "ArtifactInfo",
    "KeyInfo",
    "KeysMap",
    "load_resource",
    "VersionRange",
    "compare_versions",
    "parse_version",
]
