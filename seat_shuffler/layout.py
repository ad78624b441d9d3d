from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Optional, Sequence

if TYPE_CHECKING:
    from .config import Settings


LOG = logging.getLogger(__name__)


class LayoutError(Exception):
    pass


def balance(student_count: int, column_count: int) -> list[int]:
    """
    Spread student_count seats over column_count columns so depths differ by
    at most one. Extra seats go to the center columns first, then outward,
    left side before right side on every step.
    """
    base, remainder = divmod(student_count, column_count)
    depths = [base] * column_count

    left = (column_count - 1) // 2
    right = column_count // 2  # ceil((column_count - 1) / 2)
    if left == right:
        # odd column count: the center takes one extra seat via the left step
        right += 1

    remaining = remainder
    while remaining > 0:
        if left >= 0:
            depths[left] += 1
            remaining -= 1
            left -= 1
        if remaining > 0 and right < column_count:
            depths[right] += 1
            remaining -= 1
            right += 1
    return depths


def build_rng(*, seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)


def shuffle(n: int, rng: Optional[random.Random] = None) -> list[int]:
    """Fisher-Yates over [1..n]; every ordering is equally likely."""
    rng = rng or random.Random()
    numbers = list(range(1, n + 1))
    for i in range(n - 1, 0, -1):
        j = rng.randint(0, i)
        numbers[i], numbers[j] = numbers[j], numbers[i]
    return numbers


class OccupancyGrid:
    """
    max(depths) rows x column_count cols. Row 0 is the front (nearest the
    podium), column 0 is the left side seen from the podium. Empty cells
    hold None.
    """

    def __init__(self, rows: int, cols: int, cells: Optional[list[list[Optional[int]]]] = None):
        self.rows = rows
        self.cols = cols
        if cells is None:
            self.grid: list[list[Optional[int]]] = [[None for _ in range(cols)] for _ in range(rows)]
        else:
            if len(cells) != rows or any(len(r) != cols for r in cells):
                raise LayoutError("grid dimensions do not match rows/cols")
            self.grid = cells

    def get(self, row: int, col: int) -> Optional[int]:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise LayoutError(f"cell out of bounds: row={row}, col={col}")
        return self.grid[row][col]

    def cells(self) -> Iterator[tuple[int, int, Optional[int]]]:
        for r in range(self.rows):
            for c in range(self.cols):
                yield r, c, self.grid[r][c]

    def occupied(self) -> Iterator[tuple[int, int, int]]:
        for r, c, value in self.cells():
            if value is not None:
                yield r, c, value

    def numbers(self) -> list[int]:
        return [value for _, _, value in self.occupied()]

    def column_depth(self, col: int) -> int:
        return sum(1 for r in range(self.rows) if self.grid[r][col] is not None)


def assign(permutation: Sequence[int], depths: Sequence[int], column_count: int) -> OccupancyGrid:
    """
    Fill each column front to back before moving to the next column, taking
    permutation values in order through one shared cursor.
    """
    grid = OccupancyGrid(max(depths), column_count)
    cursor = 0
    for col in range(column_count):
        for row in range(depths[col]):
            grid.grid[row][col] = permutation[cursor]
            cursor += 1
    return grid


@dataclass(frozen=True)
class SeatLayoutRequest:
    student_count: int
    column_count: int
    depths: tuple[int, ...]

    def __post_init__(self) -> None:
        if self.student_count < 1 or self.column_count < 1:
            raise LayoutError("student_count and column_count must be positive integers")
        if len(self.depths) != self.column_count:
            raise LayoutError(f"expected {self.column_count} column depths, got {len(self.depths)}")
        if any(d < 1 for d in self.depths):
            raise LayoutError("every column needs at least one seat")
        if sum(self.depths) != self.student_count:
            raise LayoutError(f"column depths sum to {sum(self.depths)}, expected {self.student_count}")

    @classmethod
    def balanced(cls, student_count: int, column_count: int) -> "SeatLayoutRequest":
        if student_count < column_count:
            # balance() would leave empty columns
            raise LayoutError(f"{student_count} seats cannot fill {column_count} columns")
        return cls(student_count, column_count, tuple(balance(student_count, column_count)))

    @classmethod
    def manual(cls, depths: Sequence[int]) -> "SeatLayoutRequest":
        depths = tuple(int(d) for d in depths)
        if not depths:
            raise LayoutError("at least one column is required")
        return cls(sum(depths), len(depths), depths)

    def check_limits(self, settings: "Settings") -> None:
        if self.column_count > settings.max_columns:
            raise LayoutError(f"at most {settings.max_columns} columns are supported")
        if max(self.depths) > settings.max_depth:
            raise LayoutError(f"at most {settings.max_depth} seats per column are supported")
        if self.student_count > settings.max_seats:
            raise LayoutError(f"total seats must be between 1 and {settings.max_seats}")


def build_request(
    *,
    student_count: Optional[int] = None,
    column_count: Optional[int] = None,
    depths: Optional[Sequence[int]] = None,
    default_columns: int = 6,
    default_depth: int = 6,
) -> SeatLayoutRequest:
    """
    Manual depths win; otherwise balance student_count over the columns.
    With neither, every column gets default_depth seats.
    """
    if depths:
        request = SeatLayoutRequest.manual(depths)
        if student_count is not None and student_count != request.student_count:
            raise LayoutError(f"column depths sum to {request.student_count}, but student_count is {student_count}")
        if column_count is not None and column_count != request.column_count:
            raise LayoutError(f"{request.column_count} column depths given, but column_count is {column_count}")
        return request
    columns = column_count if column_count is not None else default_columns
    if student_count is None:
        return SeatLayoutRequest.manual([default_depth] * columns)
    return SeatLayoutRequest.balanced(student_count, columns)


def generate_grid(request: SeatLayoutRequest, rng: Optional[random.Random] = None) -> OccupancyGrid:
    permutation = shuffle(request.student_count, rng)
    grid = assign(permutation, request.depths, request.column_count)
    LOG.info(
        "assigned %d seats over %d columns (depths=%s)",
        request.student_count,
        request.column_count,
        list(request.depths),
    )
    return grid
