"""Run rustdoc with JSON output and locate the generated file."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from . import config
from .config_manager import Manifest
from .errors import DocBuildError

logger = logging.getLogger(__name__)


def rustdoc_command(manifest_path: Path) -> List[str]:
    return [
        config.CARGO,
        config.TOOLCHAIN,
        "rustdoc",
        "--all-features",
        "--manifest-path",
        str(manifest_path),
        "--",
        "-Z",
        "unstable-options",
        "--output-format",
        "json",
    ]


def build_docs(manifest: Manifest, skip_build: bool = False) -> Path:
    """Build the JSON docs for *manifest* (unless *skip_build*) and return their path."""
    if not skip_build:
        cmd = rustdoc_command(manifest.path)
        logger.debug("Running %s", " ".join(cmd))
        try:
            completed = subprocess.run(cmd, stdout=subprocess.DEVNULL, check=False)
        except OSError as exc:
            raise DocBuildError(f"failed to run {config.CARGO}: {exc}") from exc
        if completed.returncode != 0:
            raise DocBuildError("failed to build docs")

    return find_doc_json(manifest)


def find_doc_json(manifest: Manifest) -> Path:
    package = manifest.crate_name
    target = config.target_dir(manifest.path)
    entries = sorted(target.glob(f"**/doc/{package}.json"))
    if not entries:
        raise DocBuildError(f"{package}.json file not found in target directory")
    logger.debug("Found %s", entries[0])
    return entries[0]
