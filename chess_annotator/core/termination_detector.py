# chess_annotator/core/termination_detector.py
"""
Decides whether the game in a position has ended, who won, and why.

This is a pure function of the position: every answer comes from Rules Engine
status queries, and the engine's own definition of a draw is accepted as-is.
"""

from typing import Optional, TYPE_CHECKING

from chess_annotator.types import ONGOING, GameResult, Position, Termination

if TYPE_CHECKING:
    from chess_annotator.types import RulesEngine


def _draw_reason(engine: "RulesEngine", position: Position) -> Optional[Termination]:
    if engine.is_stalemate(position):
        return Termination.STALEMATE
    if engine.is_insufficient_material(position):
        return Termination.INSUFFICIENT_MATERIAL
    if engine.is_threefold_repetition(position):
        return Termination.THREEFOLD_REPETITION
    if engine.is_fifty_moves(position):
        return Termination.FIFTY_MOVES
    return None


def detect_termination(engine: "RulesEngine", position: Position) -> GameResult:
    """
    Computes the `GameResult` for a position.

    On checkmate the winner is the side not to move, and `terminal_square`
    marks the mated king so the board can annotate it. Every other finished
    game is a draw with no terminal square.

    Args:
        engine: The Rules Engine that produced `position`.
        position: The position currently displayed by the session.

    Returns:
        A `GameResult`; the shared `ONGOING` value if the game continues.
    """
    if engine.is_checkmate(position):
        loser = position.side_to_move
        return GameResult(
            is_over=True,
            winner=loser.opponent.value,
            terminal_square=position.find_king(loser),
            reason=Termination.CHECKMATE,
        )

    if engine.is_draw(position):
        return GameResult(is_over=True, winner="draw", terminal_square=None, reason=_draw_reason(engine, position))

    return ONGOING
