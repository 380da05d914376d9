from __future__ import annotations


class PublicApiCratesError(Exception):
    """Base error for all failures surfaced to the command line."""


class ManifestError(PublicApiCratesError):
    """Errors raised while reading or parsing Cargo.toml."""


class DocBuildError(PublicApiCratesError):
    """Errors raised while building or locating the rustdoc JSON file."""


class DocJsonError(PublicApiCratesError):
    """Errors raised while loading a malformed rustdoc JSON document."""


class DataIntegrityError(PublicApiCratesError):
    """An id in an analysis result could not be resolved against its crate."""
