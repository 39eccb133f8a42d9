"""Unit tests for game/board.py - Cell and Board."""
import pytest

from game.board import Board, Cell
from game.errors import GameError, OutOfRangeError


class TestCell:
    """Tests for the Cell value type."""

    def test_new_cell_is_empty(self):
        cell = Cell(0, 0)
        assert cell.is_empty
        assert cell.content is None

    def test_negative_coordinates_rejected(self):
        with pytest.raises(ValueError):
            Cell(-1, 0)
        with pytest.raises(ValueError):
            Cell(0, -1)

    def test_with_content_returns_new_cell(self):
        """Test copy-on-write: the original cell is untouched."""
        cell = Cell(1, 2)
        filled = cell.with_content("X")

        assert filled.content == "X"
        assert (filled.row, filled.col) == (1, 2)
        assert cell.is_empty

    def test_blank_content_rejected(self):
        with pytest.raises(ValueError):
            Cell(0, 0).with_content("   ")

    def test_emptied(self):
        assert Cell(0, 0, "X").emptied().is_empty


class TestBoardConstruction:
    """Tests for Board creation and bounds."""

    def test_every_cell_exists(self):
        board = Board(3, 4)
        assert len(board.cells()) == 12
        assert board.get(2, 3) == Cell(2, 3)

    @pytest.mark.parametrize("rows,cols", [(0, 3), (3, 0), (-1, 2)])
    def test_non_positive_dimensions_rejected(self, rows, cols):
        with pytest.raises(ValueError):
            Board(rows, cols)

    @pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (3, 0), (0, 3), (10, 10)])
    def test_out_of_range_access_raises(self, row, col):
        board = Board(3, 3)
        with pytest.raises(OutOfRangeError):
            board.get(row, col)
        with pytest.raises(OutOfRangeError):
            board.place(row, col, "X")

    def test_out_of_range_is_game_error_and_index_error(self):
        with pytest.raises(GameError):
            Board(2, 2).get(5, 5)
        with pytest.raises(IndexError):
            Board(2, 2).row(2)

    def test_coordinates_valid_never_raises(self):
        board = Board(2, 3)
        assert board.coordinates_valid(1, 2)
        assert not board.coordinates_valid(2, 0)
        assert not board.coordinates_valid(-1, -1)


class TestBoardMutation:
    """Tests for place/clear and derived queries."""

    def test_place_then_get(self):
        board = Board(3, 3)
        for r in range(3):
            for c in range(3):
                board.place(r, c, f"{r}{c}")
                assert board.get(r, c).content == f"{r}{c}"

    def test_clear_then_get(self):
        board = Board(3, 3)
        board.place(1, 1, "X")
        board.clear(1, 1)
        assert board.get(1, 1).is_empty
        assert board.is_empty(1, 1)

    def test_clear_all(self):
        board = Board(2, 2)
        board.place(0, 0, "X")
        board.place(1, 1, "O")
        board.clear_all()
        assert board.count_occupied() == 0

    def test_occupied_and_empty_cells(self):
        board = Board(2, 2)
        board.place(0, 1, "X")
        assert [(c.row, c.col) for c in board.occupied_cells()] == [(0, 1)]
        assert len(board.empty_cells()) == 3
        assert not board.is_full

    def test_is_full(self):
        board = Board(1, 2)
        board.place(0, 0, "X")
        board.place(0, 1, "O")
        assert board.is_full

    def test_row_and_column(self):
        board = Board(2, 3)
        board.place(1, 2, "X")
        assert [c.content for c in board.row(1)] == [None, None, "X"]
        assert [c.content for c in board.column(2)] == [None, "X"]
        with pytest.raises(OutOfRangeError):
            board.column(3)

    def test_copy_is_independent(self):
        board = Board(2, 2)
        board.place(0, 0, "X")
        clone = board.copy()
        clone.place(1, 1, "O")

        assert board.is_empty(1, 1)
        assert clone.get(0, 0).content == "X"
        assert board != clone

    def test_render_marks_empty_squares(self):
        board = Board(2, 2)
        board.place(0, 0, "X")
        text = board.render()
        assert "Board 2x2" in text
        assert "X" in text
        assert "." in text


class TestBoardSerialization:
    """Tests for the board wire form."""

    def test_to_dict(self):
        board = Board(2, 2)
        board.place(0, 1, "X")
        assert board.to_dict() == {
            "filas": 2,
            "columnas": 2,
            "celdas": [[None, "X"], [None, None]],
        }

    def test_from_dict_restores_board(self):
        board = Board(3, 2)
        board.place(2, 1, "♔")
        assert Board.from_dict(board.to_dict()) == board

    @pytest.mark.parametrize("data", [
        {"filas": "3", "columnas": 2},
        {"filas": 2, "columnas": 2, "celdas": [[1, None], [None, None]]},
    ])
    def test_from_dict_rejects_wrong_types(self, data):
        with pytest.raises(ValueError):
            Board.from_dict(data)
