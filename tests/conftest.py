"""Pytest configuration and fixtures for public-api-crates tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from public_api_crates.loader import load_crate
from public_api_crates.models import (
    Crate,
    ExternalCrate,
    FnDecl,
    Function,
    Item,
    ItemSummary,
    PathRef,
    ResolvedPathType,
    Span,
)

SAMPLE_REPORT = """\
serde
└── serde::ser::Serialize
    ├── src/lib.rs:3:1
    └── src/lib.rs:16:1

bytes
├── bytes::bytes_mut::BytesMut
│   └── src/lib.rs:3:1
├── bytes::bytes::Bytes
│   ├── src/lib.rs:12:5
│   └── src/lib.rs:26:1
└── bytes::buf::Buf
    └── src/lib.rs:2:1

http-body
└── http_body::Body
    └── src/lib.rs:22:1
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_doc_path() -> Path:
    """Path to a small rustdoc JSON document for crate ``demo``."""
    return Path(__file__).parent / "fixtures" / "sample_doc.json"


@pytest.fixture
def sample_crate(sample_doc_path: Path) -> Crate:
    return load_crate(sample_doc_path)


@pytest.fixture
def sample_report() -> str:
    """Expected default-mode output for ``sample_doc.json``."""
    return SAMPLE_REPORT


@pytest.fixture
def external_type_crate() -> Crate:
    """Local ``fn f(x: ExternalType)`` where ``ExternalType`` lives in crate ``foo`` (id 7)."""
    f = Item(
        id="0:1",
        crate_id=0,
        name="f",
        span=Span("lib.src", (10, 1), (10, 40)),
        inner=Function(
            decl=FnDecl(inputs=[("x", ResolvedPathType(PathRef("ExternalType", "7:42")))]),
        ),
    )
    return Crate(
        index={f.id: f},
        paths={"7:42": ItemSummary(crate_id=7, path=["foo", "ExternalType"], kind="struct")},
        external_crates={7: ExternalCrate(name="foo")},
    )


@pytest.fixture
def write_manifest(temp_dir: Path):
    """Write a Cargo.toml into the temp dir and return its path."""

    def _write(body: str) -> Path:
        path = temp_dir / "Cargo.toml"
        path.write_text(body, encoding="utf-8")
        return path

    return _write
