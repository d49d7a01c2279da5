"""
Diff selection: which lines of a file's diff the user wants staged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass
class DiffSelection:
    """Sparse per-line inclusion flags for one changed file.

    Lines without an explicit override fall back to
    ``include_all_by_default``. Positions are not validated against the
    diff; positions that never occur in it are simply never read.
    """
    include_all_by_default: bool = True
    overrides: dict[int, bool] = field(default_factory=dict)

    def is_include_all(self) -> bool:
        """True when every line is included."""
        return self.include_all_by_default and not self.overrides

    def is_include_none(self) -> bool:
        return not self.include_all_by_default and not self.overrides

    def get(self, position: int) -> bool:
        """Return whether the line at *position* is included."""
        return self.overrides.get(position, self.include_all_by_default)

    resolve = get

    def set(self, position: int, include: bool) -> None:
        self.overrides[position] = include

    def toggle(self, position: int) -> bool:
        include = not self.get(position)
        self.set(position, include)
        return include

    def set_all(self, include: bool) -> None:
        """Include or exclude every line, discarding individual choices."""
        self.include_all_by_default = include
        self.overrides.clear()

    def set_many(self, positions: Iterable[int], include: bool) -> None:
        for position in positions:
            self.set(position, include)

    def copy(self) -> "DiffSelection":
        return DiffSelection(self.include_all_by_default, dict(self.overrides))

    def with_overrides(self, overrides: dict[int, bool]) -> "DiffSelection":
        """Return a new selection with *overrides* layered on top of this one."""
        selection = self.copy()
        selection.overrides.update(overrides)
        return selection
