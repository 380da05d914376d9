"""Turn a :class:`ReferenceResult` into the plain-text report."""

from __future__ import annotations

from typing import Dict, List, Set

from . import config
from .analyze import ReferenceResult
from .errors import DataIntegrityError
from .models import Crate, Id, Span
from .writer import TreeNode, render_tree


def build_report_trees(krate: Crate, result: ReferenceResult) -> List[TreeNode]:
    """One tree per external crate, ordered by crate id.

    Every crate and item id in *result* came from *krate*, so a failed lookup
    here means the inputs don't belong together and is always fatal.
    """
    trees = []
    for crate_id in sorted(result.crate_id_to_public_item):
        external = krate.external_crates.get(crate_id)
        if external is None:
            raise DataIntegrityError(f"crate missing: {crate_id}")
        ids = result.crate_id_to_public_item[crate_id]
        trees.append(
            TreeNode(
                label=external.name,
                children=[_item_node(krate, item_id, result.id_to_usages) for item_id in sorted(ids)],
            )
        )
    return trees


def _item_node(krate: Crate, item_id: Id, id_to_usages: Dict[Id, Set[Span]]) -> TreeNode:
    summary = krate.paths.get(item_id)
    if summary is None:
        raise DataIntegrityError(f"path missing: {item_id}")
    spans = sorted(id_to_usages.get(item_id, ()), key=Span.sort_key)
    return TreeNode(
        label=summary.display_path,
        children=[TreeNode(str(span)) for span in spans],
        truncate_after=config.MAX_SHOWN_USAGES,
    )


def render_report(krate: Crate, result: ReferenceResult) -> str:
    """Render the report; crate blocks are separated by a blank line."""
    return "\n".join(render_tree(tree) for tree in build_report_trees(krate, result))
