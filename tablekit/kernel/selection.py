"""
tablekit Kernel — Row Selection

Selection is an immutable ordered set of record ids. It knows nothing about
pages, filters, or sort: an id stays selected until the caller removes it.

resolve_selected() maps ids back to records using the caller's identity
function over the full raw collection (not the visible page).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Selection:
    ids: tuple[str, ...] = ()

    def is_selected(self, row_id: str) -> bool:
        return row_id in self.ids

    def toggle(self, row_id: str) -> Selection:
        if row_id in self.ids:
            return Selection(tuple(i for i in self.ids if i != row_id))
        return Selection((*self.ids, row_id))

    def set_all(self, row_ids: Sequence[str]) -> Selection:
        # dict.fromkeys keeps first-seen order while dropping duplicates
        return Selection(tuple(dict.fromkeys(row_ids)))

    def clear(self) -> Selection:
        return Selection()

    def same_as(self, other: Selection) -> bool:
        return set(self.ids) == set(other.ids)

    def __len__(self) -> int:
        return len(self.ids)


def resolve_selected(
    records: Sequence[Any],
    selection: Selection,
    identity: Callable[[Any], str] | None,
) -> list[Any]:
    """Records whose identity is selected, in collection order. Empty without an identity function."""
    if identity is None or not selection:
        return []
    wanted = set(selection.ids)
    return [r for r in records if identity(r) in wanted]
