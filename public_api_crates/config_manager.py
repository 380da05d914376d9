"""Cargo.toml loading using the ``toml`` library."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Set

import toml

from . import config
from .errors import ManifestError

logger = logging.getLogger(__name__)


@dataclass
class Manifest:
    """The parts of a Cargo.toml this tool reads."""
    path: Path
    package_name: str
    allowed: Set[str] = field(default_factory=set)

    @property
    def crate_name(self) -> str:
        """Package name as rustdoc spells it in file names and crate tables."""
        return config.normalize_crate_name(self.package_name)


def find_manifest(manifest_path: Optional[Path] = None) -> Path:
    return manifest_path if manifest_path is not None else config.DEFAULT_MANIFEST


def load_manifest(manifest_path: Optional[Path] = None) -> Manifest:
    """Read *manifest_path* (default ``Cargo.toml``) and extract package metadata.

    Raises:
        ManifestError: if the file can't be read or parsed, or has no package name.
    """
    path = find_manifest(manifest_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"failed to read {path}") from exc
    try:
        data = toml.loads(text)
    except toml.TomlDecodeError as exc:
        raise ManifestError(f"failed to parse {path}: {exc}") from exc

    package: Dict[str, Any] = data.get("package") or {}
    name = package.get("name")
    if not isinstance(name, str):
        raise ManifestError(f"failed to parse {path}: missing package.name")

    return Manifest(path=path, package_name=name, allowed=_allowed_crates(package, path))


def _allowed_crates(package: Dict[str, Any], path: Path) -> Set[str]:
    metadata = (package.get("metadata") or {}).get(config.METADATA_KEY)
    if metadata is None:
        logger.warning(
            "%s has no [package.metadata.%s] table; treating the allow-list as empty",
            path,
            config.METADATA_KEY,
        )
        return set()
    allowed = metadata.get("allowed", [])
    if not isinstance(allowed, list) or not all(isinstance(name, str) for name in allowed):
        raise ManifestError(f"failed to parse {path}: 'allowed' must be a list of crate names")
    return {config.normalize_crate_name(name) for name in allowed}
