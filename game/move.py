"""Move value: a placement or a translocation between two squares."""
import math
from dataclasses import dataclass
from typing import Optional, Tuple


NO_ORIGIN = -1


@dataclass(frozen=True)
class Move:
    """
    A move on the board.

    A placement has no source square (both origin coordinates are -1) and
    puts ``content`` on the destination. A translocation carries whatever
    sits on the origin square to the destination. Geometric predicates are
    meaningless for placements and return False/0 for them.
    """

    origin_row: int
    origin_col: int
    dest_row: int
    dest_col: int
    content: Optional[str] = None

    def __post_init__(self):
        if self.dest_row < 0:
            raise ValueError("Destination row must be >= 0")
        if self.dest_col < 0:
            raise ValueError("Destination column must be >= 0")
        if self.origin_row < NO_ORIGIN:
            raise ValueError("Origin row must be >= -1")
        if self.origin_col < NO_ORIGIN:
            raise ValueError("Origin column must be >= -1")

    @classmethod
    def placement(cls, row: int, col: int, content: str) -> 'Move':
        return cls(NO_ORIGIN, NO_ORIGIN, row, col, content)

    @classmethod
    def relocate(cls, src_row: int, src_col: int, dst_row: int, dst_col: int,
                 content: Optional[str] = None) -> 'Move':
        return cls(src_row, src_col, dst_row, dst_col, content)

    @property
    def is_placement(self) -> bool:
        return self.origin_row == NO_ORIGIN and self.origin_col == NO_ORIGIN

    @property
    def origin(self) -> Tuple[int, int]:
        return self.origin_row, self.origin_col

    @property
    def destination(self) -> Tuple[int, int]:
        return self.dest_row, self.dest_col

    @property
    def _delta(self) -> Tuple[int, int]:
        return self.dest_row - self.origin_row, self.dest_col - self.origin_col

    def manhattan_distance(self) -> int:
        if self.is_placement:
            return 0
        d_row, d_col = self._delta
        return abs(d_row) + abs(d_col)

    def euclidean_distance(self) -> float:
        if self.is_placement:
            return 0.0
        d_row, d_col = self._delta
        return math.sqrt(d_row * d_row + d_col * d_col)

    def is_diagonal(self) -> bool:
        if self.is_placement:
            return False
        d_row, d_col = self._delta
        return abs(d_row) == abs(d_col)

    def is_horizontal(self) -> bool:
        if self.is_placement:
            return False
        return self.origin_row == self.dest_row and self.origin_col != self.dest_col

    def is_vertical(self) -> bool:
        if self.is_placement:
            return False
        return self.origin_col == self.dest_col and self.origin_row != self.dest_row

    def is_null_move(self) -> bool:
        if self.is_placement:
            return False
        return self.origin == self.destination

    def __str__(self) -> str:
        suffix = f" with '{self.content}'" if self.content is not None else ""
        if self.is_placement:
            return f"Placement at ({self.dest_row},{self.dest_col}){suffix}"
        return (f"Move from ({self.origin_row},{self.origin_col}) "
                f"to ({self.dest_row},{self.dest_col}){suffix}")
