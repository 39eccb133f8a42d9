"""Unit tests for game/move.py - Move value and its geometry."""
import math

import pytest

from game.move import NO_ORIGIN, Move


class TestMoveConstruction:
    """Tests for Move validation and factories."""

    def test_placement_factory(self):
        move = Move.placement(1, 2, "X")
        assert move.is_placement
        assert move.origin == (NO_ORIGIN, NO_ORIGIN)
        assert move.destination == (1, 2)
        assert move.content == "X"

    def test_relocate_is_not_placement(self):
        move = Move.relocate(0, 0, 1, 1)
        assert not move.is_placement

    def test_partial_origin_is_not_placement(self):
        """Only both origin coordinates at -1 make a placement."""
        assert not Move(NO_ORIGIN, 2, 1, 1).is_placement

    @pytest.mark.parametrize("args", [
        (0, 0, -1, 0),
        (0, 0, 0, -1),
        (-2, 0, 0, 0),
        (0, -2, 0, 0),
    ])
    def test_invalid_coordinates_rejected(self, args):
        with pytest.raises(ValueError):
            Move(*args)


class TestMoveGeometry:
    """Tests for derived predicates."""

    def test_diagonal(self):
        assert Move.relocate(2, 2, 4, 4).is_diagonal()
        assert Move.relocate(2, 2, 0, 4).is_diagonal()
        assert not Move.relocate(2, 2, 3, 4).is_diagonal()

    def test_horizontal_and_vertical(self):
        assert Move.relocate(1, 0, 1, 5).is_horizontal()
        assert not Move.relocate(1, 0, 1, 5).is_vertical()
        assert Move.relocate(0, 3, 6, 3).is_vertical()

    def test_null_move(self):
        assert Move.relocate(3, 3, 3, 3).is_null_move()
        assert not Move.relocate(3, 3, 3, 4).is_null_move()

    def test_distances(self):
        move = Move.relocate(0, 0, 3, 4)
        assert move.manhattan_distance() == 7
        assert math.isclose(move.euclidean_distance(), 5.0)

    def test_placements_have_no_geometry(self):
        move = Move.placement(2, 2, "X")
        assert not move.is_diagonal()
        assert not move.is_horizontal()
        assert not move.is_vertical()
        assert not move.is_null_move()
        assert move.manhattan_distance() == 0
        assert move.euclidean_distance() == 0.0

    def test_str(self):
        assert str(Move.placement(0, 1, "X")) == "Placement at (0,1) with 'X'"
        assert str(Move.relocate(0, 1, 2, 3)) == "Move from (0,1) to (2,3)"
