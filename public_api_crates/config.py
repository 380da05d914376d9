"""Settings for building docs and rendering reports."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

DEFAULT_MANIFEST = Path("Cargo.toml")

# Crates hidden from the report unless --include-std is passed
BUILTIN_CRATES = frozenset({"std", "alloc", "core"})

MAX_SHOWN_USAGES = 3
TREE_INDENT = 4

# Key of the allow-list table under [package.metadata]
METADATA_KEY = "cargo-public-api-crates"

CARGO = os.environ.get("CARGO", "cargo")
TOOLCHAIN = os.environ.get("PUBLIC_API_CRATES_TOOLCHAIN", "+nightly")

# rustdoc JSON format versions this tool has been run against
SUPPORTED_FORMAT_VERSIONS = range(20, 29)


def target_dir(manifest_path: Path) -> Path:
    """Return the cargo target directory for a manifest."""
    override: Optional[str] = os.environ.get("CARGO_TARGET_DIR")
    if override:
        return Path(override).expanduser()
    return manifest_path.resolve().parent / "target"


def normalize_crate_name(name: str) -> str:
    return name.replace("-", "_")
