"""Position bookkeeping for the line buffer."""
import logging
from collections.abc import Iterator
from typing import Optional

logger = logging.getLogger(__name__)


class PositionIndex:
    """Mapping from a key or section name to its line position."""

    def __init__(self):
        self._positions: dict[str, int] = {}

    def __getitem__(self, name: str) -> int:
        return self._positions[name]

    def __setitem__(self, name: str, position: int):
        self._positions[name] = position

    def __contains__(self, name: object) -> bool:
        return name in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    def get(self, name: Optional[str]) -> Optional[int]:
        if name is None:
            return None
        return self._positions.get(name)

    def discard(self, name: str):
        self._positions.pop(name, None)

    def shift_after(self, position: int, delta: int):
        """Move every entry recorded strictly after ``position`` by ``delta``."""
        for name, current in self._positions.items():
            if current > position:
                self._positions[name] = current + delta

    def as_dict(self) -> dict[str, int]:
        return dict(self._positions)
