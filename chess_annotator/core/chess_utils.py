# chess_annotator/core/chess_utils.py
"""
Provides pure, stateless helpers for material arithmetic.

This module depends only on the data contracts defined in `types.py`; its
functions are deterministic and back the material balance shown next to the
captured pieces.
"""

from typing import Dict, Final, Mapping

from chess_annotator.types import PieceType

# A constant dictionary mapping piece types to their standard pawn-unit values.
PIECE_VALUES: Final[Dict[PieceType, float]] = {
    PieceType.PAWN: 1.0,
    PieceType.KNIGHT: 3.0,
    PieceType.BISHOP: 3.0,
    PieceType.ROOK: 5.0,
    PieceType.QUEEN: 9.0,
    PieceType.KING: 0.0,
}


def material_value(counts: Mapping[PieceType, int]) -> float:
    """Sums the pawn-unit value of a piece-type multiset."""
    return sum(PIECE_VALUES[piece_type] * count for piece_type, count in counts.items())
