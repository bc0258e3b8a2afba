import asyncio
import os

import aiohttp

from utils.exceptions import ArtifactResolutionError
from utils.file_operations import save_file
from utils.logging import log_debug, log_error, log_info

MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2"
SIGNATURE_EXTENSION = "asc"


def artifact_url(base_repository_url, artifact, extension=None):
    """
    Builds the URL of an artifact file in a Maven repository layout.
    """
    path = f"{artifact.group_id.replace('.', '/')}/{artifact.artifact_id}/{artifact.version}/{artifact.file_name}"
    if extension:
        path = f"{path}.{extension}"
    return f"{base_repository_url.rstrip('/')}/{path}"


async def download_file(session, url, target_path, timeout=30):
    """
    Downloads a file to target_path.

    Returns:
        str: target_path, or None when the repository answers 404.

    Raises:
        RuntimeError: For any other failure.
    """
    log_debug(f"[Download] Attempting to download: {url}")
    try:
        async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
            if response.status == 404:
                log_debug(f"[Download] File not found: {url}")
                return None
            if response.status != 200:
                raise RuntimeError(f"Failed to download file from {url}: Status {response.status}")
            content = await response.read()
    except aiohttp.ClientError as e:
        raise RuntimeError(f"Client error downloading file from {url}: {e}") from e
    except asyncio.TimeoutError as e:
        raise RuntimeError(f"Timeout downloading file from {url}") from e

    save_file(target_path, content)
    return target_path


async def resolve_artifact(session, base_repository_url, artifact, work_dir):
    """
    Resolves the artifact file and its detached .asc signature.

    Only a 404 on the signature means "not signed"; the artifact file itself must
    be downloadable.

    Returns:
        tuple: (artifact with file set, signature path or None).

    Raises:
        ArtifactResolutionError: When the artifact is missing or any download fails.
    """
    artifact_dir = os.path.join(work_dir, artifact.group_id)
    artifact_path = os.path.join(artifact_dir, artifact.file_name)
    signature_path = f"{artifact_path}.{SIGNATURE_EXTENSION}"

    try:
        os.makedirs(artifact_dir, exist_ok=True)
        downloaded = await download_file(session, artifact_url(base_repository_url, artifact), artifact_path)
        if downloaded is None:
            raise ArtifactResolutionError(f"Artifact {artifact.id} not found in {base_repository_url}")
        signature = await download_file(
            session, artifact_url(base_repository_url, artifact, SIGNATURE_EXTENSION), signature_path)
    except (RuntimeError, ValueError, OSError) as e:
        raise ArtifactResolutionError(f"Error resolving {artifact.id}: {e}") from e

    if signature is None:
        log_debug(f"[Repository Check] No signature for {artifact.id}")
    return artifact.with_file(artifact_path), signature


async def resolve_artifacts(artifacts, work_dir, base_repository_url=MAVEN_CENTRAL_URL, verify_pom_files=True):
    """
    Resolves artifacts and their signatures concurrently.

    With verify_pom_files every non-pom artifact also brings its pom.

    Returns:
        tuple: (dict of resolved Artifact -> signature path or None in input order,
        list of artifacts that could not be resolved).
    """
    requested = []
    for artifact in artifacts:
        if artifact not in requested:
            requested.append(artifact)
        pom = artifact.with_type("pom")
        if verify_pom_files and artifact.type != "pom" and pom not in requested:
            requested.append(pom)

    os.makedirs(work_dir, exist_ok=True)
    async with aiohttp.ClientSession() as session:
        tasks = [resolve_artifact(session, base_repository_url, artifact, work_dir) for artifact in requested]
        results = await asyncio.gather(*tasks, return_exceptions=True)

    resolved = {}
    unresolved = []
    for artifact, result in zip(requested, results):
        if isinstance(result, ArtifactResolutionError):
            log_error(f"[Repository Check] {result}")
            unresolved.append(artifact)
        elif isinstance(result, BaseException):
            raise result
        else:
            resolved_artifact, signature = result
            resolved[resolved_artifact] = signature
    log_info(f"[Repository Check] Resolved {len(resolved)} of {len(requested)} artifacts")
    return resolved, unresolved
