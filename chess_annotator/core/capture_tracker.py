# chess_annotator/core/capture_tracker.py
"""
Derives the multiset of pieces removed from each side.

Two derivation strategies are supported and must agree for promotion-free
histories:

1.  **Incremental:** `record`/`unrecord` patch the multisets from the
    `captured` field of each `AppliedMove` as moves are played and undone.
2.  **Diff-based:** `derive_captures` compares a position's occupancy table
    against the canonical 32-piece setup. It needs no move history and is the
    only option for a position loaded from storage.

Captured material is keyed by the side that removed the piece, never by the
case of a piece symbol.
"""

from collections import Counter
from typing import Dict, Iterable, Mapping

import structlog

from chess_annotator.core.position_codec import count_pieces, initial_count
from chess_annotator.types import (AppliedMove, CapturedMaterial, Piece, PieceType,
                                   Position, Side)

logger = structlog.get_logger(__name__)


def _positive(counts: Mapping[PieceType, int]) -> Dict[PieceType, int]:
    return {piece_type: count for piece_type, count in counts.items() if count > 0}


def _missing_pieces(on_board: Counter, side: Side) -> Dict[PieceType, int]:
    """
    Pieces of `side` that are no longer on the board.

    Pieces above their initial count can only come from promotion, so each
    surplus piece accounts for one missing pawn that was not captured.
    """
    missing: Dict[PieceType, int] = {}
    promoted = 0
    for piece_type in PieceType:
        if piece_type is PieceType.PAWN:
            continue
        difference = initial_count(piece_type, side) - on_board[Piece(piece_type, side)]
        if difference >= 0:
            missing[piece_type] = difference
        else:
            promoted += -difference

    pawns_left = on_board[Piece(PieceType.PAWN, side)]
    missing[PieceType.PAWN] = max(0, initial_count(PieceType.PAWN, side) - pawns_left - promoted)
    return _positive(missing)


def derive_captures(position: Position) -> CapturedMaterial:
    """
    Computes captured material purely by diffing against the initial setup.

    Missing Black pieces are attributed to White and vice versa.
    """
    on_board = count_pieces(position.board)
    return CapturedMaterial(
        by_white=_missing_pieces(on_board, Side.BLACK),
        by_black=_missing_pieces(on_board, Side.WHITE),
    )


class CaptureTracker:
    """Holds the mutable capture multisets owned by a single Game Session."""

    def __init__(self) -> None:
        self._by_side: Dict[Side, Counter] = {Side.WHITE: Counter(), Side.BLACK: Counter()}

    def record(self, applied: AppliedMove) -> None:
        """Adds the piece removed by `applied`, if any, to the mover's multiset."""
        if applied.captured is None:
            return
        self._by_side[applied.side][applied.captured] += 1

    def unrecord(self, applied: AppliedMove) -> None:
        """Removes exactly one instance of the piece `applied` had captured."""
        if applied.captured is None:
            return
        counts = self._by_side[applied.side]
        if counts[applied.captured] <= 0:
            logger.warning(
                "Undo of a capture that was never recorded.",
                captured=applied.captured.value,
                side=applied.side.value,
                move=applied.uci,
            )
            return
        counts[applied.captured] -= 1

    def rebuild(self, moves: Iterable[AppliedMove]) -> None:
        """Recomputes the multisets from scratch from a sequence of applied moves."""
        self.clear()
        for applied in moves:
            self.record(applied)

    def reset_from_position(self, position: Position) -> None:
        """Replaces the multisets with a diff-based derivation of `position`."""
        derived = derive_captures(position)
        self._by_side = {
            Side.WHITE: Counter(derived.by_white),
            Side.BLACK: Counter(derived.by_black),
        }
        logger.debug(
            "Captures derived from position.",
            by_white={p.value: n for p, n in derived.by_white.items()},
            by_black={p.value: n for p, n in derived.by_black.items()},
        )

    def clear(self) -> None:
        self._by_side = {Side.WHITE: Counter(), Side.BLACK: Counter()}

    def snapshot(self) -> CapturedMaterial:
        return CapturedMaterial(
            by_white=_positive(self._by_side[Side.WHITE]),
            by_black=_positive(self._by_side[Side.BLACK]),
        )

    def matches_position(self, position: Position) -> bool:
        """True when the incremental multisets equal a diff-based derivation of `position`."""
        return self.snapshot() == derive_captures(position)
