"""Board and cell model."""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from game.errors import OutOfRangeError
from game.wire import read_int


@dataclass(frozen=True)
class Cell:
    """A single board square. Coordinates are fixed at creation."""

    row: int
    col: int
    content: Optional[str] = None

    def __post_init__(self):
        if self.row < 0:
            raise ValueError("Cell row must be >= 0")
        if self.col < 0:
            raise ValueError("Cell column must be >= 0")

    @property
    def is_empty(self) -> bool:
        return self.content is None

    def with_content(self, content: str) -> 'Cell':
        """Return a copy of this cell holding ``content``."""
        if not content or not content.strip():
            raise ValueError("Cell content cannot be blank")
        return Cell(self.row, self.col, content)

    def emptied(self) -> 'Cell':
        """Return a copy of this cell with no content."""
        return Cell(self.row, self.col, None)

    def __str__(self) -> str:
        state = "empty" if self.is_empty else f"with '{self.content}'"
        return f"Cell({self.row},{self.col}) - {state}"


class Board:
    """
    Fixed-size rectangular grid of cells.

    Mutators change only this board. Callers that need to keep a snapshot
    take a ``copy()`` first; the engine always does so before applying a move.
    """

    def __init__(self, rows: int, cols: int):
        if rows <= 0:
            raise ValueError("Board rows must be positive")
        if cols <= 0:
            raise ValueError("Board columns must be positive")

        self.rows = rows
        self.cols = cols
        self._cells: List[List[Cell]] = [
            [Cell(r, c) for c in range(cols)] for r in range(rows)
        ]

    def coordinates_valid(self, row: int, col: int) -> bool:
        """Check whether (row, col) lies on the board. Never raises."""
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _check(self, row: int, col: int):
        if not self.coordinates_valid(row, col):
            raise OutOfRangeError(
                f"Coordinates ({row}, {col}) are outside the {self.rows}x{self.cols} board"
            )

    def get(self, row: int, col: int) -> Cell:
        self._check(row, col)
        return self._cells[row][col]

    def place(self, row: int, col: int, content: str):
        """Put ``content`` on a square, replacing whatever was there."""
        self._check(row, col)
        self._cells[row][col] = self._cells[row][col].with_content(content)

    def clear(self, row: int, col: int):
        self._check(row, col)
        self._cells[row][col] = self._cells[row][col].emptied()

    def clear_all(self):
        """Empty every cell on the board."""
        for row in self._cells:
            for i, cell in enumerate(row):
                row[i] = cell.emptied()

    def is_empty(self, row: int, col: int) -> bool:
        self._check(row, col)
        return self._cells[row][col].is_empty

    def row(self, n: int) -> List[Cell]:
        if not 0 <= n < self.rows:
            raise OutOfRangeError(f"Row {n} is out of range")
        return list(self._cells[n])

    def column(self, n: int) -> List[Cell]:
        if not 0 <= n < self.cols:
            raise OutOfRangeError(f"Column {n} is out of range")
        return [row[n] for row in self._cells]

    def cells(self) -> List[Cell]:
        """All cells in row-major order."""
        return [cell for row in self._cells for cell in row]

    def occupied_cells(self) -> List[Cell]:
        return [cell for cell in self.cells() if not cell.is_empty]

    def empty_cells(self) -> List[Cell]:
        return [cell for cell in self.cells() if cell.is_empty]

    def count_occupied(self) -> int:
        return len(self.occupied_cells())

    @property
    def is_full(self) -> bool:
        return not self.empty_cells()

    def copy(self) -> 'Board':
        """Deep copy. Cells are immutable, so copying the grid rows is enough."""
        clone = Board(self.rows, self.cols)
        clone._cells = [list(row) for row in self._cells]
        return clone

    def render(self) -> str:
        """Plain text grid for logs and debugging ('.' marks an empty square)."""
        lines = [f"Board {self.rows}x{self.cols}:"]
        lines.append("   " + "".join(f"{c:2d} " for c in range(self.cols)))
        for r, row in enumerate(self._cells):
            squares = "".join(f"{(cell.content or '.')[:1]:>2} " for cell in row)
            lines.append(f"{r:2d} {squares}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire form: row-major contents, None for empty."""
        return {
            "filas": self.rows,
            "columnas": self.cols,
            "celdas": [[cell.content for cell in row] for row in self._cells],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Board':
        """Deserialize from the wire form."""
        board = cls(read_int(data, "filas"), read_int(data, "columnas"))
        cells = data.get("celdas") or []
        for r, row in enumerate(cells):
            for c, content in enumerate(row):
                if content is not None and not isinstance(content, str):
                    raise ValueError(f"Cell ({r}, {c}) content must be a string or null")
                if content:
                    board.place(r, c, content)
        return board

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (self.rows, self.cols, self._cells) == (other.rows, other.cols, other._cells)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Board({self.rows}x{self.cols}, occupied: {self.count_occupied()}/{self.rows * self.cols})"
