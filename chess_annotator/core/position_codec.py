# chess_annotator/core/position_codec.py
"""
Translates compact board notation into a per-square occupancy table and back.

The codec is used for capture derivation when move-by-move tracking is
unavailable (a position loaded from storage) or must be cross-checked. It
parses the placement field with python-chess so that the same text rules
apply here as in the Rules Engine.
"""

from collections import Counter
from typing import Dict, Final, Mapping

import chess

from chess_annotator.exceptions import MalformedNotationError
from chess_annotator.types import Piece, PieceType, Side, Square, STARTING_FEN


def _placement_field(notation: str) -> str:
    fields = notation.strip().split()
    if not fields:
        raise MalformedNotationError("Board notation is empty.")
    return fields[0]


def decode_board(notation: str) -> Dict[Square, Piece]:
    """
    Decodes a full FEN or just its placement field into an occupancy table.

    Args:
        notation: Board notation such as 'rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1'.

    Returns:
        A dictionary mapping occupied square names to `Piece` values.

    Raises:
        MalformedNotationError: If the placement field cannot be parsed.
    """
    placement = _placement_field(notation)
    try:
        base_board = chess.BaseBoard(placement)
    except ValueError as e:
        raise MalformedNotationError(f"Invalid board placement: {placement!r}") from e

    return {
        chess.square_name(square): Piece.from_symbol(piece.symbol())
        for square, piece in base_board.piece_map().items()
    }


def encode_board(board: Mapping[Square, Piece]) -> str:
    """Renders an occupancy table back into a FEN placement field."""
    base_board = chess.BaseBoard.empty()
    base_board.set_piece_map({
        chess.parse_square(square): chess.Piece.from_symbol(piece.symbol)
        for square, piece in board.items()
    })
    return base_board.board_fen()


def count_pieces(board: Mapping[Square, Piece]) -> Counter:
    """Counts the pieces on a board, keyed by `Piece`."""
    return Counter(board.values())


# Piece counts of the canonical 32-piece setup.
INITIAL_COUNTS: Final[Counter] = count_pieces(decode_board(STARTING_FEN))


def initial_count(piece_type: PieceType, side: Side) -> int:
    return INITIAL_COUNTS[Piece(piece_type, side)]
