from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from ethermine_exporter.core.errors import UnknownTargetError
from ethermine_exporter.models.target import Target


class TargetCatalog:
    """Read-only lookup of configured pools by id.

    Built once from Settings at startup.  Lookups are exact and
    case-sensitive: "Ethermine" is not "ethermine".
    """

    def __init__(self, targets: Iterable[Target]) -> None:
        table: dict[str, Target] = {}
        for target in targets:
            if target.id in table:
                raise ValueError(f"duplicate pool id in catalog: {target.id!r}")
            table[target.id] = target
        self._targets = MappingProxyType(table)

    def resolve(self, target_id: str) -> Target:
        try:
            return self._targets[target_id]
        except KeyError:
            raise UnknownTargetError(target_id) from None

    def ids(self) -> list[str]:
        return sorted(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, target_id: object) -> bool:
        return target_id in self._targets
