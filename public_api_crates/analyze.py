"""Find the external items reachable from a crate's public API."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from . import config
from .models import Crate, Id, Import, Item, PathRef, Span
from .visit import Visitor, visit_item

logger = logging.getLogger(__name__)


@dataclass
class ReferenceResult:
    """External items referenced by the local crate.

    ``crate_id_to_public_item`` maps each external crate id to the ids of its
    items that appear in the API; ``id_to_usages`` maps each such item id to
    the spans of the local items that mention it.
    """
    crate_id_to_public_item: Dict[int, Set[Id]] = field(default_factory=dict)
    id_to_usages: Dict[Id, Set[Span]] = field(default_factory=dict)

    def merge(self, other: ReferenceResult) -> ReferenceResult:
        """Return the union of two results without modifying either."""
        merged = ReferenceResult(
            crate_id_to_public_item={k: set(v) for k, v in self.crate_id_to_public_item.items()},
            id_to_usages={k: set(v) for k, v in self.id_to_usages.items()},
        )
        for crate_id, ids in other.crate_id_to_public_item.items():
            merged.crate_id_to_public_item.setdefault(crate_id, set()).update(ids)
        for item_id, spans in other.id_to_usages.items():
            merged.id_to_usages.setdefault(item_id, set()).update(spans)
        return merged


class ItemVisitor(Visitor):
    """Collects the external ids referenced from a single item."""

    def __init__(self, krate: Crate, include_std: bool) -> None:
        self.krate = krate
        self.include_std = include_std
        self.crate_id_to_public_item: Dict[int, Set[Id]] = {}

    def on_path_reference(self, path: PathRef) -> None:
        self._on_id(path.id)

    def on_import_reference(self, import_: Import) -> None:
        if import_.id is not None:
            self._on_id(import_.id)

    def _on_id(self, item_id: Id) -> None:
        summary = self.krate.paths.get(item_id)
        if summary is None:
            # stripped or private items have no path entry
            logger.debug("Dropping reference to %s: not in paths table", item_id)
            return
        external = self.krate.external_crates.get(summary.crate_id)
        if external is None:
            return
        if not self.include_std and config.normalize_crate_name(external.name) in config.BUILTIN_CRATES:
            return
        self.crate_id_to_public_item.setdefault(summary.crate_id, set()).add(item_id)


def analyze(
    krate: Crate,
    include_std: bool = False,
    items: Optional[Iterable[Item]] = None,
) -> ReferenceResult:
    """Visit every local item of *krate* (or just *items*) and collect external references."""
    result = ReferenceResult()
    roots = krate.index.values() if items is None else items

    visited = 0
    for item in roots:
        # don't search through items defined in external crates
        if not krate.is_local(item.crate_id):
            continue
        visited += 1

        item_visitor = ItemVisitor(krate, include_std)
        visit_item(item, item_visitor)

        for crate_id, ids in item_visitor.crate_id_to_public_item.items():
            if item.span is not None:
                for item_id in ids:
                    result.id_to_usages.setdefault(item_id, set()).add(item.span)
            result.crate_id_to_public_item.setdefault(crate_id, set()).update(ids)

    logger.debug(
        "Analyzed %d local items: %d external crates, %d external items",
        visited,
        len(result.crate_id_to_public_item),
        sum(len(ids) for ids in result.crate_id_to_public_item.values()),
    )
    return result


def analyze_parallel(krate: Crate, include_std: bool = False, jobs: int = 4) -> ReferenceResult:
    """Same as :func:`analyze`, with local items split across a thread pool."""
    local = krate.local_items()
    jobs = max(1, min(jobs, len(local) or 1))
    chunks: List[List[Item]] = [local[i::jobs] for i in range(jobs)]

    result = ReferenceResult()
    with ThreadPoolExecutor(max_workers=jobs) as pool:
        partials = pool.map(lambda chunk: analyze(krate, include_std, chunk), chunks)
        # partials are merged on this thread only
        for partial in partials:
            result = result.merge(partial)
    return result
