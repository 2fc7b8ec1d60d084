"""Uniform spatial grid for collision candidate lookups."""

import math


class SpatialGrid:
    """Bins points into square cells so neighbour queries stay O(1) on average.

    With ``cell_size`` at least the largest possible interaction distance, any
    two points that can interact sit in the same or adjacent cells.
    """

    def __init__(self, cell_size: float):
        self.cell_size = cell_size if cell_size > 0 else 1.0
        self._cells: dict[tuple[int, int], list[int]] = {}

    def _cell_key(self, x: float, y: float) -> tuple[int, int]:
        return (int(math.floor(x / self.cell_size)), int(math.floor(y / self.cell_size)))

    def clear(self) -> None:
        self._cells.clear()

    def insert(self, index: int, x: float, y: float) -> None:
        # Diverged (inf/NaN) points cannot be binned and never collide.
        if not (math.isfinite(x) and math.isfinite(y)):
            return
        self._cells.setdefault(self._cell_key(x, y), []).append(index)

    def neighbors(self, x: float, y: float) -> list[int]:
        """Indices in the 3x3 block of cells around (x, y)."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return []
        cx, cy = self._cell_key(x, y)
        out: list[int] = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                cell = self._cells.get((cx + dx, cy + dy))
                if cell:
                    out.extend(cell)
        return out
