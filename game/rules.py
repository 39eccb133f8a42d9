"""
Per-variant rules, resolved through a lookup table.

Each variant contributes four plain functions: move validation, end
detection, winner detection and the initial board layout. The engine looks
them up in ``RULES`` and never branches on the variant itself.

Chess and checkers are intentionally simplified: only occupancy and
direction are checked, there is no check/checkmate and no capture rule.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from game.board import Board, Cell
from game.errors import InvalidMoveError
from game.move import Move
from game.player import Player
from game.session import Variant


# Chess kings: black king belongs to the first player, white king to the second
BLACK_KING = "♚"
WHITE_KING = "♔"
KING_MARKERS = (BLACK_KING, WHITE_KING)

# Checkers sides are recognised by containment, so crowned pieces still count
CHECKERS_WHITE_MARKERS = ("♔", "♕")
CHECKERS_BLACK_MARKERS = ("♚", "♛")
CHECKERS_WHITE_MAN = "♔"
CHECKERS_BLACK_MAN = "♚"

CHESS_BLACK_BACK_RANK = ["♜", "♞", "♝", "♛", "♚", "♝", "♞", "♜"]
CHESS_WHITE_BACK_RANK = ["♖", "♘", "♗", "♕", "♔", "♗", "♘", "♖"]
CHESS_BLACK_PAWN = "♟"
CHESS_WHITE_PAWN = "♙"

# Line-three content owned by the first and second player
LINE3_SYMBOLS = ("X", "O")


@dataclass(frozen=True)
class VariantRules:
    validate: Callable[[Board, Move], None]
    is_over: Callable[[Board], bool]
    winner: Callable[[Board, List[Player]], Optional[Player]]
    setup: Callable[[Board], None]


def _nth(players: List[Player], index: int) -> Optional[Player]:
    return players[index] if 0 <= index < len(players) else None


def _require_source(board: Board, move: Move, message: str = None):
    if board.is_empty(move.origin_row, move.origin_col):
        raise InvalidMoveError(
            message or f"There is no piece at the origin ({move.origin_row}, {move.origin_col})"
        )


def _require_empty_destination(board: Board, move: Move):
    if not board.is_empty(move.dest_row, move.dest_col):
        raise InvalidMoveError(f"Cell ({move.dest_row}, {move.dest_col}) is already occupied")


def _require_content(move: Move):
    if move.content is None or not move.content.strip():
        raise InvalidMoveError("A placement must specify the content to place")


def _no_setup(board: Board):
    pass


# --- Lines ---

def winning_line_content(line: List[Cell]) -> Optional[str]:
    """Content shared by every cell of a full line, or None."""
    if not line:
        return None
    first = line[0].content
    if not first or not first.strip():
        return None
    if all(not cell.is_empty and cell.content == first for cell in line):
        return first
    return None


def board_lines(board: Board) -> List[List[Cell]]:
    """Rows, columns and (for square boards) both diagonals."""
    lines = [board.row(r) for r in range(board.rows)]
    lines.extend(board.column(c) for c in range(board.cols))
    if board.rows == board.cols:
        size = board.rows
        lines.append([board.get(i, i) for i in range(size)])
        lines.append([board.get(i, size - 1 - i) for i in range(size)])
    return lines


def find_winning_content(board: Board) -> Optional[str]:
    for line in board_lines(board):
        content = winning_line_content(line)
        if content is not None:
            return content
    return None


# --- LINE3 ---

def validate_line3(board: Board, move: Move):
    if not move.is_placement:
        raise InvalidMoveError("Line three only allows placements, not piece moves")
    _require_empty_destination(board, move)
    _require_content(move)


def line3_over(board: Board) -> bool:
    return find_winning_content(board) is not None or board.is_full


def line3_winner(board: Board, players: List[Player]) -> Optional[Player]:
    content = find_winning_content(board)
    if content in LINE3_SYMBOLS:
        return _nth(players, LINE3_SYMBOLS.index(content))
    return None


# --- CHESS ---

def validate_chess(board: Board, move: Move):
    if move.is_placement:
        raise InvalidMoveError("Chess moves must relocate an existing piece")
    _require_source(board, move)


def _kings(board: Board) -> List[str]:
    return [cell.content for cell in board.occupied_cells() if cell.content in KING_MARKERS]


def chess_over(board: Board) -> bool:
    return len(_kings(board)) < 2


def chess_winner(board: Board, players: List[Player]) -> Optional[Player]:
    kings = _kings(board)
    if len(kings) != 1:
        return None
    return _nth(players, KING_MARKERS.index(kings[0]))


def setup_chess(board: Board):
    if board.rows < 4 or board.cols < len(CHESS_BLACK_BACK_RANK):
        return
    last = board.rows - 1
    for c, (black, white) in enumerate(zip(CHESS_BLACK_BACK_RANK, CHESS_WHITE_BACK_RANK)):
        board.place(0, c, black)
        board.place(1, c, CHESS_BLACK_PAWN)
        board.place(last - 1, c, CHESS_WHITE_PAWN)
        board.place(last, c, white)


# --- CHECKERS ---

def validate_checkers(board: Board, move: Move):
    if move.is_placement:
        raise InvalidMoveError("Checkers moves must relocate an existing piece")
    _require_source(board, move)
    if not move.is_diagonal():
        raise InvalidMoveError("Checkers only allows diagonal moves")
    _require_empty_destination(board, move)


def _count_side(board: Board, markers) -> int:
    return sum(
        1 for cell in board.occupied_cells()
        if any(marker in cell.content for marker in markers)
    )


def checkers_over(board: Board) -> bool:
    return (_count_side(board, CHECKERS_WHITE_MARKERS) == 0
            or _count_side(board, CHECKERS_BLACK_MARKERS) == 0)


def checkers_winner(board: Board, players: List[Player]) -> Optional[Player]:
    white = _count_side(board, CHECKERS_WHITE_MARKERS)
    black = _count_side(board, CHECKERS_BLACK_MARKERS)
    if white == 0 and black > 0:
        return _nth(players, 0)
    if black == 0 and white > 0:
        return _nth(players, 1)
    return None


def setup_checkers(board: Board):
    if board.rows < 6:
        return
    for r in range(board.rows):
        if 3 <= r < board.rows - 3:
            continue
        marker = CHECKERS_BLACK_MAN if r < 3 else CHECKERS_WHITE_MAN
        for c in range(board.cols):
            if (r + c) % 2 == 1:
                board.place(r, c, marker)


# --- GENERIC ---

def validate_generic(board: Board, move: Move):
    if move.is_placement:
        _require_empty_destination(board, move)
        _require_content(move)
    else:
        _require_source(board, move)


def full_board(board: Board) -> bool:
    return board.is_full


def no_winner(board: Board, players: List[Player]) -> Optional[Player]:
    return None


RULES: Dict[Variant, VariantRules] = {
    Variant.LINE3: VariantRules(validate_line3, line3_over, line3_winner, _no_setup),
    Variant.CHESS: VariantRules(validate_chess, chess_over, chess_winner, setup_chess),
    Variant.CHECKERS: VariantRules(validate_checkers, checkers_over, checkers_winner, setup_checkers),
    Variant.GENERIC: VariantRules(validate_generic, full_board, no_winner, _no_setup),
}


def rules_for(variant: Variant) -> VariantRules:
    return RULES[variant]


def initial_board(variant: Variant, rows: int, cols: int) -> Board:
    """Empty board of the given size with the variant's starting layout."""
    board = Board(rows, cols)
    rules_for(variant).setup(board)
    return board
