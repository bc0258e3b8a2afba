import os
from importlib import resources

import requests
from requests.exceptions import RequestException

from keysmap.artifact_info import ArtifactInfo
from keysmap.key_info import KeyInfo
from utils.exceptions import ConfigurationError, ResourceNotFoundError
from utils.logging import log_debug, log_info

CLASSPATH_PREFIX = "classpath:"


def load_resource(location, timeout=20):
    """
    Reads a keys map from a file path, an http(s) URL or a resource inside an
    installed package ("package:resource" or "classpath:package/resource").
    """
    if location.startswith(("http://", "https://")):
        try:
            response = requests.get(location, timeout=timeout)
        except RequestException as e:
            raise ResourceNotFoundError(f"Can't download keys map {location}: {e}") from e
        if response.status_code == 404:
            raise ResourceNotFoundError(f"Keys map not found: {location}")
        if response.status_code >= 400:
            raise ResourceNotFoundError(f"Can't download keys map {location}: HTTP {response.status_code}")
        return response.text

    if os.path.isfile(location):
        with open(location, "r", encoding="utf-8") as file:
            return file.read()

    package, resource = _split_package_resource(location)
    if package:
        try:
            return resources.files(package).joinpath(resource).read_text(encoding="utf-8")
        except (ModuleNotFoundError, FileNotFoundError, NotADirectoryError) as e:
            raise ResourceNotFoundError(f"Keys map not found: {location}") from e

    raise ResourceNotFoundError(f"Keys map not found: {location}")


def _split_package_resource(location):
    if location.startswith(CLASSPATH_PREFIX):
        path = location[len(CLASSPATH_PREFIX):].lstrip("/")
        package, _, resource = path.rpartition("/")
        return package.replace("/", "."), resource
    package, separator, resource = location.partition(":")
    if separator and package and resource and "/" not in package and "\\" not in package:
        return package, resource
    return None, None


def parse_lines(content):
    """
    Yields logical (line number, text) entries: comments and blank lines are
    dropped and a trailing backslash joins a line with the next one.
    """
    pending = ""
    start = None
    for number, line in enumerate(content.splitlines(), start=1):
        line = line.split("#", 1)[0].strip()
        if start is None:
            start = number
        if line.endswith("\\"):
            pending += line[:-1].strip() + " "
            continue
        line = (pending + line).strip()
        pending = ""
        if line:
            yield start, line
        start = None
    if pending.strip():
        yield start, pending.strip()


class KeysMap:
    """
    Ordered rules mapping artifact patterns to accepted keys.

    Lookups take the first rule whose pattern matches the artifact; later rules are
    never consulted, so the order of the keys map file matters. Without any rules
    every key is valid.
    """

    def __init__(self):
        self.rules = []

    def load(self, location):
        if not location:
            log_debug("[Keys Map] No keys map location given, every key is accepted")
            return

        content = load_resource(location)
        for number, line in parse_lines(content):
            pattern, separator, keys = line.partition("=")
            if not separator:
                raise ConfigurationError(f"Invalid keys map line {number} in {location}: {line}")
            try:
                self.add_rule(pattern.strip(), keys.strip())
            except ConfigurationError as e:
                raise ConfigurationError(f"{e} (keys map {location}, line {number})") from e

        log_info(f"[Keys Map] Loaded {len(self.rules)} rules from {location}")

    def add_rule(self, artifact_pattern, key_pattern):
        self.rules.append((ArtifactInfo(artifact_pattern), KeyInfo(key_pattern)))

    def is_empty(self):
        return not self.rules

    def _find_rule(self, artifact):
        for artifact_info, key_info in self.rules:
            if artifact_info.is_match(artifact):
                return artifact_info, key_info
        return None

    def is_valid_key(self, artifact, public_key, key_ring):
        if self.is_empty():
            return True
        rule = self._find_rule(artifact)
        if rule is None:
            return False
        artifact_info, key_info = rule
        return artifact_info.is_key_match(public_key, key_ring) and key_info.is_key_match(public_key, key_ring)

    def is_no_signature(self, artifact):
        rule = self._find_rule(artifact)
        return rule is not None and rule[1].is_no_signature()

    def is_broken_signature(self, artifact):
        rule = self._find_rule(artifact)
        return rule is not None and rule[1].is_broken_signature()

    def is_key_missing(self, artifact):
        rule = self._find_rule(artifact)
        return rule is not None and rule[1].is_key_missing()
