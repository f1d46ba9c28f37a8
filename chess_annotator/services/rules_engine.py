# chess_annotator/services/rules_engine.py
"""
Provides a concrete implementation of the `RulesEngine` protocol on python-chess.

This module acts as an adapter between the session core and the `chess`
library, which owns move generation, SAN rendering, FEN parsing and all
terminal-state rules. The adapter is stateless: every `Position` it returns
carries an immutable `BoardState` (the root notation plus the UCI moves played
from it) in its `engine_state`, so the engine's "own history" travels with the
position and a fresh `chess.Board` is rebuilt from it on every call. A position
built from board notation starts with an empty move stack.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Optional, Tuple

import chess
import structlog

from chess_annotator.core.position_codec import decode_board
from chess_annotator.exceptions import IllegalMoveError, MalformedNotationError, WrongSideError
from chess_annotator.types import (FEN, AppliedMove, Move, Piece, PieceType, Position,
                                   RulesEngine, Side, Square)

logger = structlog.get_logger(__name__)

_UCI_PATTERN = re.compile(r"^[a-h][1-8][a-h][1-8][nbrq]?$")


@dataclass(frozen=True, slots=True)
class BoardState:
    """The engine's move stack for one position: a root FEN and the UCI moves played from it."""
    root_notation: FEN; moves: Tuple[str, ...] = ()


def _to_piece_type(piece_type: chess.PieceType) -> PieceType:
    return PieceType(chess.piece_symbol(piece_type))


def _from_piece_type(piece_type: PieceType) -> chess.PieceType:
    return chess.PIECE_SYMBOLS.index(piece_type.value)


def _to_side(color: chess.Color) -> Side:
    return Side.WHITE if color == chess.WHITE else Side.BLACK


def _parse_square(square: str, move_text: str) -> chess.Square:
    try:
        return chess.parse_square(square)
    except ValueError as e:
        raise IllegalMoveError(f"Unknown square {square!r}", move_text=move_text) from e


class PythonChessRulesEngine(RulesEngine):
    """A stateless rules engine backed by `chess.Board`."""

    # --- Position construction ---

    def _position_from_board(self, board: chess.Board) -> Position:
        notation = board.fen()
        return Position(
            notation=notation,
            side_to_move=_to_side(board.turn),
            board=MappingProxyType(decode_board(notation)),
            engine_state=BoardState(board.root().fen(), tuple(move.uci() for move in board.move_stack)),
        )

    def _board_for(self, position: Position) -> chess.Board:
        """Rebuilds a private, mutable board for `position`, move stack included."""
        state = position.engine_state
        if not isinstance(state, BoardState):
            # A position built outside this engine has no move stack to restore.
            return chess.Board(position.notation)
        board = chess.Board(state.root_notation)
        for uci in state.moves:
            board.push(chess.Move.from_uci(uci))
        return board

    def new_game(self) -> Position:
        return self._position_from_board(chess.Board())

    def from_board_notation(self, notation: str) -> Position:
        """
        Reconstructs a position from FEN text.

        Raises:
            MalformedNotationError: If python-chess cannot parse the text or the
                                    resulting position is not a legal setup.
        """
        try:
            board = chess.Board(notation.strip())
        except ValueError as e:
            raise MalformedNotationError(f"Invalid board notation: {notation!r}") from e

        if not board.is_valid():
            logger.debug(
                "Board notation parsed but is not a legal setup.", notation=notation, status=int(board.status())
            )
            raise MalformedNotationError(
                f"Board notation describes an impossible position ({board.status()!r}): {notation!r}"
            )
        return self._position_from_board(board)

    def to_board_notation(self, position: Position) -> FEN:
        return self._board_for(position).fen()

    # --- Moves ---

    def legal_moves(self, position: Position, from_square: Optional[Square] = None) -> List[Move]:
        board = self._board_for(position)
        origin = _parse_square(from_square, from_square) if from_square else None
        moves: List[Move] = []
        for legal in board.legal_moves:
            if origin is not None and legal.from_square != origin:
                continue
            promotion = _to_piece_type(legal.promotion) if legal.promotion else None
            moves.append(Move(chess.square_name(legal.from_square), chess.square_name(legal.to_square), promotion))
        return moves

    def _to_chess_move(self, board: chess.Board, move: Move) -> Tuple[chess.Move, chess.Piece]:
        """Resolves `move` against `board`, returning it with the piece that moves."""
        from_square = _parse_square(move.from_square, move.uci)
        to_square = _parse_square(move.to_square, move.uci)

        piece = board.piece_at(from_square)
        if piece is None:
            raise WrongSideError(f"No piece on {move.from_square}.", move_text=move.uci)
        if piece.color != board.turn:
            raise WrongSideError(
                f"Piece on {move.from_square} does not belong to the side to move.", move_text=move.uci
            )

        promotion = _from_piece_type(move.promotion) if move.promotion else None
        if promotion is None and piece.piece_type == chess.PAWN and chess.square_rank(to_square) in (0, 7):
            # Promotion without an explicit piece defaults to a queen.
            promotion = chess.QUEEN
        return chess.Move(from_square, to_square, promotion=promotion), piece

    def apply_move(self, position: Position, move: Move) -> AppliedMove:
        """
        Validates and applies a move.

        Raises:
            WrongSideError: If the from-square is empty or holds an opponent's piece.
            IllegalMoveError: If the move is not legal in `position`.
        """
        board = self._board_for(position)
        chess_move, mover = self._to_chess_move(board, move)
        if chess_move not in board.legal_moves:
            raise IllegalMoveError(f"Illegal move {chess_move.uci()!r} in {board.fen()!r}", move_text=move.uci)

        captured: Optional[PieceType] = None
        if board.is_en_passant(chess_move):
            captured = PieceType.PAWN
        elif board.is_capture(chess_move):
            victim = board.piece_at(chess_move.to_square)
            captured = _to_piece_type(victim.piece_type) if victim else None

        san = board.san(chess_move)
        board.push(chess_move)
        return AppliedMove(
            from_square=chess.square_name(chess_move.from_square),
            to_square=chess.square_name(chess_move.to_square),
            promotion=_to_piece_type(chess_move.promotion) if chess_move.promotion else None,
            side=_to_side(mover.color),
            piece=_to_piece_type(mover.piece_type),
            captured=captured,
            san=san,
            uci=chess_move.uci(),
            resulting_position=self._position_from_board(board),
        )

    def piece_at(self, position: Position, square: Square) -> Optional[Piece]:
        """The piece on `square`; raises `IllegalMoveError` for an unknown square name."""
        piece = self._board_for(position).piece_at(_parse_square(square, square))
        return Piece.from_symbol(piece.symbol()) if piece else None

    def undo_last(self, position: Position) -> Optional[Position]:
        """Unwinds the engine's own move stack by one move, or returns None if it is empty."""
        board = self._board_for(position)
        if not board.move_stack:
            return None
        board.pop()
        return self._position_from_board(board)

    def parse_move(self, position: Position, text: str) -> Move:
        """
        Parses move text in either UCI ('g1f3') or SAN ('Nf3') form.

        Raises:
            IllegalMoveError: If the text is neither valid UCI nor legal SAN.
        """
        candidate = text.strip()
        if _UCI_PATTERN.match(candidate):
            return Move.from_uci(candidate)

        board = self._board_for(position)
        try:
            parsed = board.parse_san(candidate)
        except ValueError as e:
            raise IllegalMoveError(f"Cannot parse move {candidate!r}: {e}", move_text=candidate) from e
        promotion = _to_piece_type(parsed.promotion) if parsed.promotion else None
        return Move(chess.square_name(parsed.from_square), chess.square_name(parsed.to_square), promotion)

    def replay(self, start: Position, moves: List[Move]) -> List[AppliedMove]:
        """Applies `moves` in order from `start`; raises on the first rejected move."""
        applied: List[AppliedMove] = []
        current = start
        for move in moves:
            result = self.apply_move(current, move)
            applied.append(result)
            current = result.resulting_position
        return applied

    # --- Status queries ---

    def is_check(self, position: Position) -> bool:
        return self._board_for(position).is_check()

    def is_checkmate(self, position: Position) -> bool:
        return self._board_for(position).is_checkmate()

    def is_stalemate(self, position: Position) -> bool:
        return self._board_for(position).is_stalemate()

    def is_insufficient_material(self, position: Position) -> bool:
        return self._board_for(position).is_insufficient_material()

    def is_threefold_repetition(self, position: Position) -> bool:
        return self._board_for(position).is_repetition(3)

    def is_fifty_moves(self, position: Position) -> bool:
        return self._board_for(position).is_fifty_moves()

    def is_draw(self, position: Position) -> bool:
        board = self._board_for(position)
        return (
            board.is_stalemate()
            or board.is_insufficient_material()
            or board.is_fifty_moves()
            or board.is_repetition(3)
        )

    def is_game_over(self, position: Position) -> bool:
        return self.is_checkmate(position) or self.is_draw(position)
