# tests/core/test_chess_utils.py
from chess_annotator.core.chess_utils import PIECE_VALUES, material_value
from chess_annotator.types import CapturedMaterial, PieceType


def test_material_value_of_counts():
    assert material_value({PieceType.QUEEN: 1, PieceType.PAWN: 2}) == 11.0
    assert material_value({}) == 0.0


def test_full_side_is_worth_39():
    counts = {PieceType.PAWN: 8, PieceType.KNIGHT: 2, PieceType.BISHOP: 2, PieceType.ROOK: 2, PieceType.QUEEN: 1}
    assert material_value(counts) == 39.0
    assert PIECE_VALUES[PieceType.KING] == 0.0


def test_material_balance_is_white_minus_black():
    captured = CapturedMaterial(by_white={PieceType.ROOK: 1}, by_black={PieceType.KNIGHT: 1, PieceType.PAWN: 1})
    assert captured.material_balance == 1.0
