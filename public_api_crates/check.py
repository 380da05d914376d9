"""Compare the crates in the public API against the manifest's allow-list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Set

from . import config
from .analyze import ReferenceResult
from .errors import DataIntegrityError
from .models import Crate


@dataclass
class CheckReport:
    in_api_but_not_allowed: List[str] = field(default_factory=list)
    allowed_but_not_in_api: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.in_api_but_not_allowed and not self.allowed_but_not_in_api

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def lines(self) -> List[str]:
        lines = []
        if self.in_api_but_not_allowed:
            lines.append("Crates in public API that weren't allowed:")
            lines.extend(f"    {name}" for name in self.in_api_but_not_allowed)
        if self.allowed_but_not_in_api:
            lines.append("Crates that were allowed but not in public API:")
            lines.extend(f"    {name}" for name in self.allowed_but_not_in_api)
        return lines


def crates_in_public_api(krate: Crate, result: ReferenceResult) -> Set[str]:
    names = set()
    for crate_id in result.crate_id_to_public_item:
        external = krate.external_crates.get(crate_id)
        if external is None:
            raise DataIntegrityError(f"crate missing: {crate_id}")
        names.add(config.normalize_crate_name(external.name))
    return names


def compare(in_api: Iterable[str], allowed: Iterable[str]) -> CheckReport:
    in_api = set(in_api)
    allowed = set(allowed)
    return CheckReport(
        in_api_but_not_allowed=sorted(in_api - allowed),
        allowed_but_not_in_api=sorted(allowed - in_api),
    )
