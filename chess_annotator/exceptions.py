# chess_annotator/exceptions.py
"""
Defines custom exceptions for the Chess Annotator session core.

Centralizing exceptions in this module prevents circular dependencies that can
arise when different components need to catch errors defined in others. Every
error shares the `ChessAnnotatorError` base so the Game Session boundary can
catch the whole family at once and hand it back to its caller as a value.
"""

from typing import Optional


class ChessAnnotatorError(Exception):
    """Base class for all application-specific, catchable errors."""
    pass


class MoveError(ChessAnnotatorError):
    """
    Base class for a rejected move request.

    Attributes:
        move_text: The move as the caller supplied it (UCI, SAN or a `Move`
                   rendered to UCI), kept for inline feedback.
    """
    def __init__(self, message: str, move_text: Optional[str] = None):
        super().__init__(message)
        self.move_text = move_text


class IllegalMoveError(MoveError):
    """
    Raised when a move is not among the legal moves of the current position.

    This also covers malformed input such as unknown squares or unparseable
    move text. The session state is never mutated when this is raised.
    """
    pass


class WrongSideError(MoveError):
    """Raised when the from-square is empty or holds a piece of the side not to move."""
    pass


class PositionError(ChessAnnotatorError):
    """Base class for errors raised while replacing the session position wholesale."""
    pass


class MalformedNotationError(PositionError):
    """
    Raised when board notation fails Rules Engine parsing.

    This covers unparseable FEN text as well as syntactically valid FEN that
    describes an impossible position (missing kings, pawns on the back rank).
    """
    pass


class MalformedMoveListError(PositionError):
    """Raised when a supplied move list cannot be replayed from the initial position."""
    pass


class HistoryInvariantViolation(ChessAnnotatorError):
    """
    Raised when the Rules Engine and Move History disagree about a position.

    This indicates an Engine/History desynchronization during undo or redo.
    It is internal-only: the session treats it as fatal and resets itself.
    """
    def __init__(self, message: str, expected: Optional[str] = None, actual: Optional[str] = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class AnalysisServiceError(ChessAnnotatorError):
    """
    Raised inside the analysis client when a request cannot be completed.

    It never leaves the client: callers observe a `None` result instead.
    """
    pass
