# tests/core/test_capture_tracker.py
import pytest

from chess_annotator.core.capture_tracker import CaptureTracker, derive_captures
from chess_annotator.types import PieceType

P, N, B, R, Q = PieceType.PAWN, PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN


def _applied_moves(engine, moves, position=None):
    position = position or engine.new_game()
    applied = []
    for text in moves:
        result = engine.apply_move(position, engine.parse_move(position, text))
        applied.append(result)
        position = result.resulting_position
    return applied


def test_starting_position_has_no_captures(engine):
    assert derive_captures(engine.new_game()).is_empty()


def test_sparse_position_is_derived_by_diff(engine):
    position = engine.from_board_notation("r3k3/4p3/8/8/8/8/3QP3/4K3 w - - 0 1")

    captured = derive_captures(position)

    assert captured.by_white == {Q: 1, R: 1, B: 2, N: 2, P: 7}
    assert captured.by_black == {R: 2, B: 2, N: 2, P: 7}


def test_promoted_pieces_offset_missing_pawns(engine):
    # Two white queens and seven pawns: the eighth pawn promoted, it was not captured.
    position = engine.from_board_notation("4k3/8/8/8/8/8/PPPPPPP1/QQ2K3 w - - 0 1")

    captured = derive_captures(position)

    assert captured.by_black == {R: 2, B: 2, N: 2}
    assert P not in captured.by_black


def test_record_keys_by_capturing_side(engine):
    tracker = CaptureTracker()
    for applied in _applied_moves(engine, ["e4", "d5", "exd5", "Qxd5", "Nc3", "Qxa2"]):
        tracker.record(applied)

    snapshot = tracker.snapshot()

    assert snapshot.by_white == {P: 1}
    assert snapshot.by_black == {P: 2}


def test_unrecord_removes_one_instance(engine):
    # Arrange
    applied = _applied_moves(engine, ["e4", "d5", "exd5", "Qxd5", "Nc3", "Qxa2"])
    tracker = CaptureTracker()
    tracker.rebuild(applied)

    # Act
    tracker.unrecord(applied[-1])

    # Assert
    assert tracker.snapshot().by_black == {P: 1}
    assert tracker.snapshot().by_white == {P: 1}


def test_unrecord_of_unknown_capture_is_ignored(engine):
    applied = _applied_moves(engine, ["e4", "d5", "exd5"])
    tracker = CaptureTracker()

    tracker.unrecord(applied[-1])

    assert tracker.snapshot().is_empty()


def test_zero_counts_are_not_reported(engine):
    applied = _applied_moves(engine, ["e4", "d5", "exd5"])
    tracker = CaptureTracker()
    tracker.record(applied[-1])
    tracker.unrecord(applied[-1])

    assert tracker.snapshot().by_white == {}


def test_en_passant_records_a_pawn(engine):
    applied = _applied_moves(engine, ["e4", "a6", "e5", "d5", "exd6"])
    tracker = CaptureTracker()
    tracker.rebuild(applied)

    assert applied[-1].captured is P
    assert tracker.snapshot().by_white == {P: 1}


@pytest.mark.parametrize("moves", [
    ["e4", "d5", "exd5", "Qxd5", "Nc3", "Qxa2", "Rxa2"],
    ["e4", "e5", "Bc4", "Nc6", "Qh5", "Nf6", "Qxf7#"],
    ["d4", "e5", "dxe5", "Bb4+", "c3", "Bxc3+", "Nxc3"],
])
def test_incremental_and_diff_agree_without_promotion(engine, moves):
    applied = _applied_moves(engine, moves)
    tracker = CaptureTracker()
    tracker.rebuild(applied)

    assert tracker.matches_position(applied[-1].resulting_position)
    assert tracker.snapshot() == derive_captures(applied[-1].resulting_position)


def test_reset_from_position_replaces_counts(engine):
    tracker = CaptureTracker()
    tracker.rebuild(_applied_moves(engine, ["e4", "d5", "exd5"]))

    tracker.reset_from_position(engine.from_board_notation("4k3/8/8/8/8/8/8/4K3 w - - 0 1"))

    snapshot = tracker.snapshot()
    assert snapshot.by_white == {Q: 1, R: 2, B: 2, N: 2, P: 8}
    assert snapshot.by_black == {Q: 1, R: 2, B: 2, N: 2, P: 8}
    assert snapshot.material_balance == 0


def test_material_balance_and_display_order(engine):
    tracker = CaptureTracker()
    tracker.rebuild(_applied_moves(engine, ["e4", "d5", "exd5", "Qxd5", "Nc3", "Qxa2", "Rxa2"]))

    snapshot = tracker.snapshot()
    by_white, by_black = snapshot.as_lists()

    assert by_white == [Q, P]
    assert by_black == [P, P]
    assert snapshot.material_balance == 8.0


def test_clear_empties_both_sides(engine):
    tracker = CaptureTracker()
    tracker.rebuild(_applied_moves(engine, ["e4", "d5", "exd5"]))
    tracker.clear()
    assert tracker.snapshot().is_empty()
