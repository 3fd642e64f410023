"""Package version lookup from a JSON dependency manifest."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .schemas import DependencyMap, PackageVersions

logger = logging.getLogger(__name__)

DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")
_VERSION_MODIFIERS = ("^", "~")


def _normalise_version(version: str) -> str:
    if version.startswith(_VERSION_MODIFIERS):
        return version[1:]
    return version


def _merge_sections(manifest: Any) -> DependencyMap:
    versions: DependencyMap = {}
    if not isinstance(manifest, dict):
        return versions
    for section in DEPENDENCY_SECTIONS:
        entries = manifest.get(section)
        if not isinstance(entries, dict):
            continue
        for package, version in entries.items():
            if isinstance(version, str):
                versions[package] = _normalise_version(version)
    return versions


def read_package_versions(file_path: str) -> PackageVersions:
    """Return ``{package: version}`` from a manifest, or a diagnostic string.

    The path is resolved against the working directory. Later sections
    override earlier ones, so a ``devDependencies`` entry wins over the same
    package in ``dependencies``. Problems with the file are reported in the
    returned string rather than raised.
    """
    resolved = (Path.cwd() / file_path).resolve(strict=False)
    if not resolved.is_file():
        return f"Dependency file not found at: {resolved}"

    try:
        content = resolved.read_text(encoding="utf-8")
        manifest = json.loads(content)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse dependency file %s: %s", file_path, exc)
        return f"Error parsing JSON in {file_path}: {exc}"
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to read dependency file %s: %s", file_path, exc)
        return f"Error processing dependency file {file_path}: {exc}"

    versions = _merge_sections(manifest)
    if not versions:
        return f"No dependencies found in {file_path}."
    return versions
