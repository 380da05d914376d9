"""Report which external crates leak through a crate's public API."""

__version__ = "0.1.0"
