# chess_annotator/types.py
"""
A central module for shared data structures and service interfaces (Protocols).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import (Any, Final, List, Mapping, Optional, Protocol, Tuple,
                    TypeAlias, runtime_checkable)

from chess_annotator.exceptions import IllegalMoveError

FEN: TypeAlias = str
Square: TypeAlias = str

FILES: Final[str] = "abcdefgh"
RANKS: Final[str] = "12345678"
SQUARE_NAMES: Final[Tuple[Square, ...]] = tuple(f + r for r in RANKS for f in FILES)

STARTING_FEN: Final[FEN] = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


class Side(str, Enum):
    WHITE = "white"; BLACK = "black"

    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE


class PieceType(str, Enum):
    PAWN = "p"; KNIGHT = "n"; BISHOP = "b"; ROOK = "r"; QUEEN = "q"; KING = "k"


class Termination(str, Enum):
    CHECKMATE = "Checkmate"; STALEMATE = "Stalemate"
    INSUFFICIENT_MATERIAL = "Insufficient Material"
    THREEFOLD_REPETITION = "Threefold Repetition"; FIFTY_MOVES = "Fifty-Move Rule"


# Display order for captured material, most valuable first.
PIECE_ORDER: Final[Tuple[PieceType, ...]] = (
    PieceType.QUEEN, PieceType.ROOK, PieceType.BISHOP, PieceType.KNIGHT, PieceType.PAWN, PieceType.KING
)

# --- DATA CONTRACTS ---

@dataclass(frozen=True, slots=True)
class Piece:
    piece_type: PieceType; side: Side

    @property
    def symbol(self) -> str:
        """FEN-style symbol: upper case for White, lower case for Black."""
        return self.piece_type.value.upper() if self.side is Side.WHITE else self.piece_type.value

    @classmethod
    def from_symbol(cls, symbol: str) -> "Piece":
        side = Side.WHITE if symbol.isupper() else Side.BLACK
        return cls(PieceType(symbol.lower()), side)


@dataclass(frozen=True, slots=True)
class Move:
    """A move request. Squares are lowercase algebraic names such as 'e2'."""
    from_square: Square; to_square: Square; promotion: Optional[PieceType] = None

    @property
    def uci(self) -> str:
        suffix = self.promotion.value if self.promotion else ""
        return f"{self.from_square}{self.to_square}{suffix}"

    @classmethod
    def from_uci(cls, text: str) -> "Move":
        """Parses 'e2e4' or 'e7e8q'. Raises IllegalMoveError on malformed text."""
        text = text.strip().lower()
        if len(text) not in (4, 5):
            raise IllegalMoveError(f"Malformed move text: {text!r}", move_text=text)
        from_square, to_square = text[:2], text[2:4]
        if from_square not in SQUARE_NAMES or to_square not in SQUARE_NAMES:
            raise IllegalMoveError(f"Malformed square in move: {text!r}", move_text=text)
        promotion: Optional[PieceType] = None
        if len(text) == 5:
            if text[4] not in "nbrq":
                raise IllegalMoveError(f"Invalid promotion piece in move: {text!r}", move_text=text)
            promotion = PieceType(text[4])
        return cls(from_square, to_square, promotion)


@dataclass(frozen=True, slots=True)
class Position:
    """
    A full board state plus side to move.

    `board` is the read-only per-square occupancy table; empty squares are
    absent. `engine_state` is an opaque, immutable handle owned by the Rules
    Engine that produced this value and takes no part in equality.
    """
    notation: FEN
    side_to_move: Side
    board: Mapping[Square, Piece] = field(hash=False)
    engine_state: Any = field(default=None, compare=False, repr=False, hash=False)

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.board.get(square)

    def find_king(self, side: Side) -> Optional[Square]:
        for square, piece in self.board.items():
            if piece.piece_type is PieceType.KING and piece.side is side:
                return square
        return None


@dataclass(frozen=True, slots=True)
class AppliedMove:
    """A move plus the consequences of applying it. Immutable once created."""
    from_square: Square; to_square: Square; promotion: Optional[PieceType]
    side: Side; piece: PieceType; captured: Optional[PieceType]
    san: str; uci: str; resulting_position: Position

    def as_move(self) -> Move:
        return Move(self.from_square, self.to_square, self.promotion)


@dataclass(frozen=True)
class CapturedMaterial:
    """
    Pieces removed from the board, keyed by the side that removed them.

    `by_white` holds Black's pieces taken by White's moves; `by_black` holds
    White's pieces taken by Black's moves.
    """
    by_white: Mapping[PieceType, int] = field(default_factory=dict)
    by_black: Mapping[PieceType, int] = field(default_factory=dict)

    @property
    def material_balance(self) -> float:
        """Material gained by White minus material gained by Black, in pawn units."""
        from chess_annotator.core.chess_utils import material_value
        return material_value(self.by_white) - material_value(self.by_black)

    def as_lists(self) -> Tuple[List[PieceType], List[PieceType]]:
        """Returns (by_white, by_black) expanded into lists, most valuable first."""
        def expand(counts: Mapping[PieceType, int]) -> List[PieceType]:
            return [p for p in PIECE_ORDER for _ in range(counts.get(p, 0))]
        return expand(self.by_white), expand(self.by_black)

    def is_empty(self) -> bool:
        return not any(self.by_white.values()) and not any(self.by_black.values())


@dataclass(frozen=True, slots=True)
class GameResult:
    is_over: bool = False
    winner: Optional[str] = None  # "white" | "black" | "draw"
    terminal_square: Optional[Square] = None
    reason: Optional[Termination] = None


ONGOING: Final[GameResult] = GameResult()


@dataclass(frozen=True, slots=True)
class OpeningClassification:
    name: str; variation: str; family: str


@dataclass(frozen=True)
class SessionSnapshot:
    position: Position
    played: Tuple[str, ...]
    played_count: int
    can_undo: bool
    can_redo: bool
    captured: CapturedMaterial
    game_result: GameResult
    opening: Optional[OpeningClassification]
    is_check: bool = False
    last_move: Optional[AppliedMove] = None


@dataclass(frozen=True)
class SessionResult:
    """The outcome of a public session operation: the current snapshot plus an optional error."""
    snapshot: SessionSnapshot
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# --- PROTOCOLS: Abstract Interfaces for Collaborators ---
# These define the "contracts" that concrete implementations must adhere to.
# They enable dependency inversion and allow for easy mocking in tests.

@runtime_checkable
class RulesEngine(Protocol):
    """Defines the abstract interface for a chess rules engine."""
    def new_game(self) -> Position: ...
    def from_board_notation(self, notation: str) -> Position: ...
    def to_board_notation(self, position: Position) -> FEN: ...
    def legal_moves(self, position: Position, from_square: Optional[Square] = None) -> List[Move]: ...
    def apply_move(self, position: Position, move: Move) -> AppliedMove: ...
    def undo_last(self, position: Position) -> Optional[Position]: ...
    def piece_at(self, position: Position, square: Square) -> Optional[Piece]: ...
    def parse_move(self, position: Position, text: str) -> Move: ...
    def replay(self, start: Position, moves: List[Move]) -> List[AppliedMove]: ...
    def is_check(self, position: Position) -> bool: ...
    def is_checkmate(self, position: Position) -> bool: ...
    def is_draw(self, position: Position) -> bool: ...
    def is_stalemate(self, position: Position) -> bool: ...
    def is_threefold_repetition(self, position: Position) -> bool: ...
    def is_insufficient_material(self, position: Position) -> bool: ...
    def is_fifty_moves(self, position: Position) -> bool: ...
    def is_game_over(self, position: Position) -> bool: ...


@runtime_checkable
class AnalysisService(Protocol):
    """Defines the abstract interface for the advisory position-analysis backend."""
    async def analyze(self, board_notation: FEN, search_depth: Optional[int] = None) -> Optional[Any]: ...
    async def best_move(self, board_notation: FEN, search_depth: Optional[int] = None) -> Optional[Any]: ...
    async def evaluate_move(
        self, board_notation_before: FEN, move_uci: str, search_depth: Optional[int] = None
    ) -> Optional[Any]: ...
    async def close(self) -> None: ...


