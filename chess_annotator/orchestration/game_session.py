# chess_annotator/orchestration/game_session.py
"""
Defines the `GameSession`, the single owner of a game's mutable state.

The session composes Move History, the Capture Tracker, the Termination
Detector and the Opening Classifier into one state machine. Every public
operation runs to completion synchronously and finishes by building exactly
one new immutable `SessionSnapshot`; callers never observe partial updates.

Errors never cross the session boundary as exceptions. Each operation returns
a `SessionResult` carrying the current snapshot and, on failure, the error.
"""

from typing import Iterable, List, Optional, Sequence, Union, TYPE_CHECKING

import structlog

from chess_annotator.config.settings import SessionSettings
from chess_annotator.core.capture_tracker import CaptureTracker
from chess_annotator.core.move_history import MoveHistory
from chess_annotator.core.opening_book import OPENINGS, Opening
from chess_annotator.core.opening_classifier import classify_opening
from chess_annotator.core.termination_detector import detect_termination
from chess_annotator.exceptions import (HistoryInvariantViolation, MalformedMoveListError,
                                        MoveError, PositionError)
from chess_annotator.orchestration.handoff import HandoffGameResult, SessionHandoff
from chess_annotator.tracing import new_session_id, trace_operation
from chess_annotator.types import (FEN, ONGOING, AppliedMove, Move, Position, SessionResult,
                                   SessionSnapshot, Square)
from chess_annotator.utils import metrics

if TYPE_CHECKING:
    from chess_annotator.types import RulesEngine

logger = structlog.get_logger(__name__)

MoveInput = Union[Move, str]


class GameSession:
    """
    The Game Session state machine exposed to the presentation layer.

    Thread-safety: a session must be driven from a single thread (the UI
    thread). Analysis responses arriving later are checked against
    `is_current` before being shown.
    """

    def __init__(
        self,
        engine: "RulesEngine",
        book: Sequence[Opening] = OPENINGS,
        settings: Optional[SessionSettings] = None,
        session_id: Optional[str] = None,
    ):
        """
        Initializes a session at the canonical initial position.

        Args:
            engine: The Rules Engine collaborator.
            book: The opening database used for classification.
            settings: Session behaviour switches.
            session_id: Identifier bound into log context; generated if omitted.
        """
        self.session_id = session_id or new_session_id()
        self._engine = engine
        self._book = book
        self._settings = settings or SessionSettings()
        self._history = MoveHistory(engine)
        self._captures = CaptureTracker()
        self._game_result = ONGOING
        self._opening = None
        self._snapshot = self._refresh()

    # --- Read-only access ---

    @property
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def position(self) -> Position:
        return self._history.current

    @property
    def previous_position(self) -> Optional[Position]:
        """The recorded position before the last played move, or None if nothing was played."""
        played_count = len(self._history.played)
        return self._history.position_at(played_count - 1) if played_count else None

    def is_current(self, board_notation: FEN) -> bool:
        """True if `board_notation` is the position the session currently shows."""
        return board_notation == self._snapshot.position.notation

    def legal_moves(self, from_square: Optional[Square] = None) -> List[Move]:
        """
        Legal moves in the current position, optionally only those leaving `from_square`.

        An unknown square name has no legal moves.
        """
        try:
            return self._engine.legal_moves(self._history.current, from_square)
        except MoveError as e:
            logger.info("Legal move query rejected.", square=e.move_text, reason=str(e))
            return []

    # --- Mutating operations ---

    @trace_operation
    def apply_move(self, move: MoveInput) -> SessionResult:
        """
        Plays a move given as a `Move` or as UCI/SAN text.

        On rejection the error is returned with the unchanged snapshot.
        """
        try:
            if isinstance(move, str):
                move = self._engine.parse_move(self._history.current, move)
            applied = self._history.play(move)
        except MoveError as e:
            metrics.MOVES_REJECTED_TOTAL.labels(error_type=type(e).__name__).inc()
            logger.info("Move rejected.", move=e.move_text, reason=str(e))
            return SessionResult(self._snapshot, e)

        self._captures.record(applied)
        metrics.MOVES_APPLIED_TOTAL.inc()
        logger.debug("Move applied.", san=applied.san, uci=applied.uci)
        self._snapshot = self._refresh()
        return SessionResult(self._snapshot)

    @trace_operation
    def undo(self) -> SessionResult:
        """Takes back the last move; a no-op on an empty history."""
        ply_before = len(self._history.played)
        try:
            applied = self._history.undo()
        except HistoryInvariantViolation as e:
            return self._fail_fatally(e)

        if applied is None:
            return SessionResult(self._snapshot)

        if ply_before <= self._history.anchor_index:
            # Leaving a loaded position: its captures were never tracked move by move.
            self._captures.reset_from_position(self._history.current)
        else:
            self._captures.unrecord(applied)
        metrics.HISTORY_NAVIGATION_TOTAL.labels(direction="undo").inc()
        self._snapshot = self._refresh()
        return SessionResult(self._snapshot)

    @trace_operation
    def redo(self) -> SessionResult:
        """Re-applies the most recently undone move; a no-op on an empty redo buffer."""
        try:
            applied = self._history.redo()
        except HistoryInvariantViolation as e:
            return self._fail_fatally(e)

        if applied is None:
            return SessionResult(self._snapshot)

        if len(self._history.played) <= self._history.anchor_index:
            self._captures.reset_from_position(self._history.current)
        else:
            self._captures.record(applied)
        metrics.HISTORY_NAVIGATION_TOTAL.labels(direction="redo").inc()
        self._snapshot = self._refresh()
        return SessionResult(self._snapshot)

    @trace_operation
    def load_position(
        self, board_notation: FEN, moves: Optional[Iterable[MoveInput]] = None
    ) -> SessionResult:
        """
        Replaces the session wholesale with a position given as board notation.

        The notation is authoritative and is not replayed from `moves`. When
        `moves` are supplied they are replayed from the initial position only
        to seed the move list and opening classification. Captures are always
        derived by diffing the loaded board.

        On malformed input the previous snapshot is kept and the error returned.
        """
        try:
            position = self._engine.from_board_notation(board_notation)
            seeded = self._replay_move_list(list(moves)) if moves else []
        except PositionError as e:
            metrics.POSITIONS_LOADED_TOTAL.labels(outcome="rejected").inc()
            logger.info("Position load rejected.", notation=board_notation, reason=str(e))
            return SessionResult(self._snapshot, e)

        if seeded:
            self._history.seed(seeded, position)
        else:
            self._history.reset(position)
        self._captures.reset_from_position(position)
        metrics.POSITIONS_LOADED_TOTAL.labels(outcome="ok").inc()
        logger.info("Position loaded.", notation=position.notation, seeded_moves=len(seeded))
        self._snapshot = self._refresh()
        return SessionResult(self._snapshot)

    @trace_operation
    def reset(self) -> SessionResult:
        """Restores the canonical initial position and clears all derived state."""
        self._reset_state()
        return SessionResult(self._snapshot)

    # --- Handoff between screens ---

    def export_handoff(self) -> SessionHandoff:
        result = self._snapshot.game_result
        return SessionHandoff(
            board_notation=self._snapshot.position.notation,
            played_moves=list(self._snapshot.played),
            game_result=HandoffGameResult(
                is_over=result.is_over, winner=result.winner, terminal_square=result.terminal_square
            ) if result.is_over else None,
        )

    def load_handoff(self, handoff: SessionHandoff) -> SessionResult:
        result = self.load_position(handoff.board_notation, handoff.played_moves or None)
        known = handoff.game_result
        if result.ok and known is not None and known.is_over != result.snapshot.game_result.is_over:
            logger.warning(
                "Handoff game result disagrees with the loaded position; using the recomputed result.",
                handoff_is_over=known.is_over,
            )
        return result

    # --- Internals ---

    def _replay_move_list(self, moves: List[MoveInput]) -> List[AppliedMove]:
        """Replays a supplied move list from the initial position into applied moves."""
        applied: List[AppliedMove] = []
        current = self._history.initial_position
        for index, move in enumerate(moves):
            try:
                if isinstance(move, str):
                    move = self._engine.parse_move(current, move)
                result = self._engine.apply_move(current, move)
            except MoveError as e:
                raise MalformedMoveListError(f"Move {index + 1} ({move!s}) cannot be replayed: {e}") from e
            applied.append(result)
            current = result.resulting_position
        return applied

    def _reset_state(self) -> None:
        self._history.reset()
        self._captures.clear()
        self._snapshot = self._refresh()

    def _fail_fatally(self, error: HistoryInvariantViolation) -> SessionResult:
        metrics.HISTORY_INVARIANT_VIOLATIONS_TOTAL.inc()
        logger.error(
            "Engine and move history are out of sync; resetting session.",
            expected=error.expected,
            actual=error.actual,
            reason=str(error),
        )
        self._reset_state()
        return SessionResult(self._snapshot, error)

    def _refresh(self) -> SessionSnapshot:
        """Recomputes termination and opening, then builds the next snapshot."""
        current = self._history.current
        played = self._history.played
        self._game_result = detect_termination(self._engine, current)
        self._opening = classify_opening(self._history.san_moves, self._book)

        if self._settings.verify_captures:
            self._verify_captures(current, played)

        return SessionSnapshot(
            position=current,
            played=tuple(applied.san for applied in played),
            played_count=len(played),
            can_undo=self._history.can_undo,
            can_redo=self._history.can_redo,
            captured=self._captures.snapshot(),
            game_result=self._game_result,
            opening=self._opening,
            is_check=self._engine.is_check(current),
            last_move=played[-1] if played else None,
        )

    def _verify_captures(self, current: Position, played: Sequence[AppliedMove]) -> None:
        if any(applied.promotion for applied in played):
            return
        if not self._captures.matches_position(current):
            logger.warning(
                "Incremental captures disagree with board diff.",
                notation=current.notation,
                incremental=self._captures.snapshot(),
            )
