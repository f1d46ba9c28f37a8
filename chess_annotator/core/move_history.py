# chess_annotator/core/move_history.py
"""
Defines `MoveHistory`, the ordered log of applied moves and its redo buffer.

The history is two stacks: `played` (chronological) and `undone` (most
recently undone last). Any genuinely new move clears `undone`, discarding the
branch; no tree of variations is kept.

Positions are authoritative in two places: the `resulting_position` of every
applied move, and an *anchor* position. The anchor is the position the
session was started from or loaded into, sitting after the first
`anchor_index` played moves. A loaded position is trusted as-is even when
replaying the supplied moves would not reach it.

Undo prefers the Rules Engine's own move stack. When that stack is empty but
moves remain (a session restored by seeding rather than sequential play), the
position is rebuilt by replaying the remaining moves from the canonical
initial position. Either way the result is checked against the recorded
position, and any disagreement raises `HistoryInvariantViolation`.
"""

from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

import structlog

from chess_annotator.exceptions import HistoryInvariantViolation, MoveError
from chess_annotator.types import AppliedMove, Move, Position

if TYPE_CHECKING:
    from chess_annotator.types import RulesEngine

logger = structlog.get_logger(__name__)


class MoveHistory:
    """Owns the `played`/`undone` stacks and the current position of one session."""

    def __init__(self, engine: "RulesEngine", initial_position: Optional[Position] = None):
        """
        Initializes an empty history.

        Args:
            engine: The Rules Engine used for validation, undo and replay.
            initial_position: The canonical initial position; defaults to the
                              engine's standard starting position.
        """
        self._engine = engine
        self._initial = initial_position or engine.new_game()
        self._played: List[AppliedMove] = []
        self._undone: List[AppliedMove] = []
        self._anchor_index = 0
        self._anchor_position = self._initial
        self._current = self._initial

    # --- Read-only views ---

    @property
    def current(self) -> Position:
        return self._current

    @property
    def initial_position(self) -> Position:
        return self._initial

    @property
    def played(self) -> Tuple[AppliedMove, ...]:
        return tuple(self._played)

    @property
    def undone(self) -> Tuple[AppliedMove, ...]:
        return tuple(self._undone)

    @property
    def san_moves(self) -> List[str]:
        return [applied.san for applied in self._played]

    @property
    def can_undo(self) -> bool:
        return bool(self._played)

    @property
    def can_redo(self) -> bool:
        return bool(self._undone)

    @property
    def anchor_index(self) -> int:
        return self._anchor_index

    def position_at(self, ply: int) -> Position:
        """The authoritative position after the first `ply` played moves."""
        if ply == self._anchor_index:
            return self._anchor_position
        if ply == 0:
            return self._initial
        return self._played[ply - 1].resulting_position

    # --- Wholesale replacement ---

    def reset(self, position: Optional[Position] = None) -> None:
        """Empties both stacks and anchors the history at `position` (default: the initial position)."""
        anchor = position or self._initial
        self._played = []
        self._undone = []
        self._anchor_index = 0
        self._anchor_position = anchor
        self._current = anchor

    def seed(self, moves: Sequence[AppliedMove], anchor_position: Position) -> None:
        """
        Installs an externally supplied history and anchors `anchor_position` after it.

        `moves` must already have been replayed from the initial position; the
        anchor position itself is not derived from them.
        """
        self._played = list(moves)
        self._undone = []
        self._anchor_index = len(self._played)
        self._anchor_position = anchor_position
        self._current = anchor_position

    # --- State transitions ---

    def play(self, move: Move) -> AppliedMove:
        """
        Applies a new move and discards the redo buffer.

        Raises:
            MoveError: If the Rules Engine rejects the move; history is unchanged.
        """
        applied = self._engine.apply_move(self._current, move)
        if len(self._played) < self._anchor_index:
            # The anchor lies on the discarded branch.
            self._anchor_index = 0
            self._anchor_position = self._initial
        self._played.append(applied)
        if self._undone:
            logger.debug("New move discards redo branch.", discarded=len(self._undone))
        self._undone.clear()
        self._current = applied.resulting_position
        return applied

    def undo(self) -> Optional[AppliedMove]:
        """
        Takes back the last played move and pushes it onto the redo buffer.

        Returns:
            The undone move, or None if nothing has been played.

        Raises:
            HistoryInvariantViolation: If the rebuilt position disagrees with
                                       the recorded one. State is unchanged.
        """
        if not self._played:
            return None

        target_ply = len(self._played) - 1
        expected = self.position_at(target_ply)

        previous = self._engine.undo_last(self._current)
        if previous is None:
            logger.debug("Engine move stack is empty, rebuilding position by replay.", target_ply=target_ply)
            previous = self._replay_to(target_ply)

        if previous.notation != expected.notation:
            raise HistoryInvariantViolation(
                "Undo produced a position that differs from the recorded history.",
                expected=expected.notation,
                actual=previous.notation,
            )

        applied = self._played.pop()
        self._undone.append(applied)
        self._current = self._anchor_position if target_ply == self._anchor_index else previous
        return applied

    def redo(self) -> Optional[AppliedMove]:
        """
        Re-applies the most recently undone move without clearing the rest of the buffer.

        Returns:
            The redone move, or None if the redo buffer is empty.

        Raises:
            HistoryInvariantViolation: If the move is no longer legal or leads
                                       somewhere other than the recorded position.
        """
        if not self._undone:
            return None

        pending = self._undone[-1]
        target_ply = len(self._played) + 1
        try:
            reapplied = self._engine.apply_move(self._current, pending.as_move())
        except MoveError as e:
            raise HistoryInvariantViolation(
                f"Redo of {pending.uci!r} was rejected by the rules engine: {e}",
                expected=pending.resulting_position.notation,
                actual=self._current.notation,
            ) from e

        at_anchor = target_ply == self._anchor_index
        if not at_anchor and reapplied.resulting_position.notation != pending.resulting_position.notation:
            raise HistoryInvariantViolation(
                "Redo produced a position that differs from the recorded history.",
                expected=pending.resulting_position.notation,
                actual=reapplied.resulting_position.notation,
            )

        self._undone.pop()
        self._played.append(pending)
        self._current = self._anchor_position if at_anchor else reapplied.resulting_position
        return pending

    def _replay_to(self, ply: int) -> Position:
        """Rebuilds the position after `ply` played moves from the initial position."""
        moves = [applied.as_move() for applied in self._played[:ply]]
        try:
            replayed = self._engine.replay(self._initial, moves)
        except MoveError as e:
            raise HistoryInvariantViolation(
                f"Recorded moves cannot be replayed from the initial position: {e}"
            ) from e
        return replayed[-1].resulting_position if replayed else self._initial
