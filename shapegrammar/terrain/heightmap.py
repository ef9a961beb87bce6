"""HeightMap — 2D float grid consumed by grammars as an opaque parameter."""

from __future__ import annotations


class HeightMap:
    """2D float grid backed by a flat row-major list."""

    __slots__ = ("width", "height", "_values")

    def __init__(self, width: int, height: int, default: float = 0.0) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"HeightMap size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._values: list[float] = [default] * (width * height)

    def _idx(self, x: int, y: int) -> int:
        return y * self.width + x

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> float:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} map")
        return self._values[self._idx(x, y)]

    def set(self, x: int, y: int, value: float) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} map")
        self._values[self._idx(x, y)] = value

    def sample(self, u: float, v: float) -> float:
        """Nearest value at normalized coordinates (u, v) in [0, 1]."""
        x = min(int(u * self.width), self.width - 1)
        y = min(int(v * self.height), self.height - 1)
        return self._values[self._idx(max(x, 0), max(y, 0))]

    def min(self) -> float:
        return min(self._values)

    def max(self) -> float:
        return max(self._values)

    def rows(self) -> list[list[float]]:
        return [self._values[y * self.width:(y + 1) * self.width] for y in range(self.height)]

    def values(self) -> list[float]:
        return list(self._values)
