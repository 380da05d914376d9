"""Tests for report assembly."""

import pytest

from public_api_crates.analyze import ReferenceResult, analyze
from public_api_crates.errors import DataIntegrityError
from public_api_crates.models import Crate, ExternalCrate, ItemSummary, Span
from public_api_crates.output import build_report_trees, render_report


def test_end_to_end_single_reference(external_type_crate: Crate):
    text = render_report(external_type_crate, analyze(external_type_crate))

    assert text == "foo\n└── foo::ExternalType\n    └── lib.src:10:1\n"


def test_sample_document_report(sample_crate: Crate, sample_report: str):
    assert render_report(sample_crate, analyze(sample_crate)) == sample_report


def test_empty_result_renders_nothing(sample_crate: Crate):
    assert render_report(sample_crate, ReferenceResult()) == ""


def test_crates_and_items_are_sorted():
    krate = Crate(
        paths={
            "9:2": ItemSummary(9, ["zeta", "B"]),
            "9:1": ItemSummary(9, ["zeta", "A"]),
            "3:1": ItemSummary(3, ["alpha", "X"]),
        },
        external_crates={9: ExternalCrate("zeta"), 3: ExternalCrate("alpha")},
    )
    result = ReferenceResult({9: {"9:2", "9:1"}, 3: {"3:1"}}, {})

    trees = build_report_trees(krate, result)

    assert [t.label for t in trees] == ["alpha", "zeta"]
    assert [c.label for c in trees[1].children] == ["zeta::A", "zeta::B"]


def test_usages_sorted_and_truncated():
    spans = {
        Span("src/b.rs", (1, 1), (1, 5)),
        Span("src/a.rs", (9, 1), (9, 5)),
        Span("src/a.rs", (2, 7), (2, 9)),
        Span("src/a.rs", (2, 3), (2, 9)),
        Span("src/a.rs", (2, 3), (2, 4)),
    }
    krate = Crate(paths={"7:1": ItemSummary(7, ["foo", "A"])}, external_crates={7: ExternalCrate("foo")})

    text = render_report(krate, ReferenceResult({7: {"7:1"}}, {"7:1": spans}))

    assert text.splitlines() == [
        "foo",
        "└── foo::A",
        "    ├── src/a.rs:2:3",
        "    ├── src/a.rs:2:3",
        "    ├── src/a.rs:2:7",
        "    └── and 2 more...",
    ]


def test_item_without_usages_has_no_children():
    krate = Crate(paths={"7:1": ItemSummary(7, ["foo", "A"])}, external_crates={7: ExternalCrate("foo")})
    assert render_report(krate, ReferenceResult({7: {"7:1"}}, {})) == "foo\n└── foo::A\n"


def test_missing_crate_is_fatal():
    krate = Crate(paths={"7:1": ItemSummary(7, ["foo", "A"])})
    with pytest.raises(DataIntegrityError, match="crate missing"):
        render_report(krate, ReferenceResult({7: {"7:1"}}, {}))


def test_missing_path_is_fatal():
    krate = Crate(external_crates={7: ExternalCrate("foo")})
    with pytest.raises(DataIntegrityError, match="path missing"):
        render_report(krate, ReferenceResult({7: {"7:1"}}, {}))
