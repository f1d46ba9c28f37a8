# tests/core/test_position_codec.py
import pytest

from chess_annotator.core.position_codec import (INITIAL_COUNTS, count_pieces, decode_board,
                                                 encode_board, initial_count)
from chess_annotator.exceptions import MalformedNotationError
from chess_annotator.types import Piece, PieceType, Side, STARTING_FEN


def test_decode_starting_position():
    board = decode_board(STARTING_FEN)
    assert len(board) == 32
    assert board["e1"] == Piece(PieceType.KING, Side.WHITE)
    assert board["d8"] == Piece(PieceType.QUEEN, Side.BLACK)
    assert "e4" not in board


def test_decode_accepts_placement_only():
    board = decode_board("4k3/8/8/8/8/8/8/4K3")
    assert board == {
        "e8": Piece(PieceType.KING, Side.BLACK),
        "e1": Piece(PieceType.KING, Side.WHITE),
    }


def test_encode_round_trips_placement():
    placement = "r3k3/4p3/8/8/8/8/3QP3/4K3"
    assert encode_board(decode_board(placement + " w - - 0 1")) == placement


@pytest.mark.parametrize("notation", ["", "   ", "xyz", "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP w - - 0 1"])
def test_decode_rejects_malformed_notation(notation):
    with pytest.raises(MalformedNotationError):
        decode_board(notation)


def test_initial_counts():
    assert sum(INITIAL_COUNTS.values()) == 32
    assert initial_count(PieceType.PAWN, Side.BLACK) == 8
    assert initial_count(PieceType.QUEEN, Side.WHITE) == 1
    assert count_pieces(decode_board(STARTING_FEN)) == INITIAL_COUNTS
