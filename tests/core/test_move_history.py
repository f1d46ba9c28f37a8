# tests/core/test_move_history.py
import pytest

from chess_annotator.core.move_history import MoveHistory
from chess_annotator.exceptions import HistoryInvariantViolation, IllegalMoveError
from chess_annotator.services.rules_engine import PythonChessRulesEngine
from chess_annotator.types import Move, STARTING_FEN

AFTER_E4_E5_NF3 = "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 1 2"
AFTER_E4_E5 = "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 2"


class ForgetfulEngine(PythonChessRulesEngine):
    """An engine whose undo always lands on the starting position."""

    def undo_last(self, position):
        return self.new_game()


@pytest.fixture
def history(engine):
    return MoveHistory(engine)


def _play(history, engine, moves):
    for text in moves:
        history.play(engine.parse_move(history.current, text))


def _replayed(engine, moves):
    """Applies SAN moves from the starting position and returns the applied moves."""
    position = engine.new_game()
    applied = []
    for text in moves:
        applied.append(engine.apply_move(position, engine.parse_move(position, text)))
        position = applied[-1].resulting_position
    return applied


def test_new_history_is_empty(history):
    assert history.current.notation == STARTING_FEN
    assert not history.can_undo
    assert not history.can_redo
    assert history.undo() is None
    assert history.redo() is None


def test_play_appends_and_advances(history, engine):
    _play(history, engine, ["e4", "e5", "Nf3"])

    assert history.san_moves == ["e4", "e5", "Nf3"]
    assert history.current.notation == AFTER_E4_E5_NF3
    assert history.can_undo


def test_rejected_move_leaves_history_unchanged(history, engine):
    _play(history, engine, ["e4"])
    before = history.current

    with pytest.raises(IllegalMoveError):
        history.play(Move("e7", "e4"))

    assert history.current is before
    assert history.san_moves == ["e4"]


def test_undo_restores_byte_identical_notation(history, engine):
    _play(history, engine, ["e4", "e5", "Nf3"])

    undone = history.undo()

    assert undone.san == "Nf3"
    assert history.current.notation == AFTER_E4_E5
    assert history.undone == (undone,)


def test_undo_redo_round_trip(history, engine):
    _play(history, engine, ["e4", "e5", "Nf3", "Nc6"])
    notation = history.current.notation

    for _ in range(4):
        history.undo()
    assert history.current.notation == STARTING_FEN
    for _ in range(4):
        history.redo()

    assert history.current.notation == notation
    assert history.san_moves == ["e4", "e5", "Nf3", "Nc6"]
    assert not history.can_redo


def test_redo_keeps_remaining_buffer(history, engine):
    _play(history, engine, ["e4", "e5", "Nf3"])
    history.undo()
    history.undo()

    redone = history.redo()

    assert redone.san == "e5"
    assert [applied.san for applied in history.undone] == ["Nf3"]


def test_new_move_discards_redo_branch(history, engine):
    _play(history, engine, ["e4", "e5", "Nf3"])
    history.undo()

    _play(history, engine, ["Nc3"])

    assert not history.can_redo
    assert history.san_moves == ["e4", "e5", "Nc3"]


def test_seeded_history_undoes_by_replay(history, engine):
    # Arrange
    seeded = _replayed(engine, ["e4", "e5", "Nf3"])
    anchor = engine.from_board_notation(AFTER_E4_E5_NF3)
    history.seed(seeded, anchor)

    # Act
    history.undo()

    # Assert
    assert history.anchor_index == 3
    assert history.current.notation == AFTER_E4_E5
    history.undo()
    assert history.current.notation == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"


def test_redo_onto_anchor_restores_loaded_position(history, engine):
    # The loaded position is not reachable from the seeded moves.
    seeded = _replayed(engine, ["e4", "e5"])
    anchor = engine.from_board_notation("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")
    history.seed(seeded, anchor)

    history.undo()
    assert history.current.notation == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
    history.redo()

    assert history.current is anchor
    assert history.position_at(2) is anchor


def test_playing_below_anchor_discards_it(history, engine):
    seeded = _replayed(engine, ["e4", "e5"])
    history.seed(seeded, engine.from_board_notation("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1"))
    history.undo()
    history.undo()

    _play(history, engine, ["d4"])

    assert history.anchor_index == 0
    assert history.position_at(0).notation == STARTING_FEN
    history.undo()
    assert history.current.notation == STARTING_FEN


def test_reset_to_loaded_position(history, engine):
    _play(history, engine, ["e4"])
    loaded = engine.from_board_notation("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1")

    history.reset(loaded)

    assert history.current is loaded
    assert history.played == ()
    assert history.position_at(0) is loaded


def test_undo_mismatch_raises_and_keeps_state():
    engine = ForgetfulEngine()
    history = MoveHistory(engine)
    _play(history, engine, ["e4", "e5"])
    before = history.current

    with pytest.raises(HistoryInvariantViolation) as excinfo:
        history.undo()

    assert excinfo.value.actual == STARTING_FEN
    assert history.current is before
    assert len(history.played) == 2
    assert not history.can_redo
