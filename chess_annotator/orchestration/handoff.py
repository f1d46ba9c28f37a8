# chess_annotator/orchestration/handoff.py
"""
Defines the session handoff structure passed between screens.

The handoff is not a durable store: it carries just enough to rebuild a
session elsewhere, and `GameSession.load_handoff` is its only ingestion point.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class HandoffGameResult(BaseModel):
    """The game result as last known by the screen that produced the handoff."""
    is_over: bool
    winner: Optional[str] = None
    terminal_square: Optional[str] = None

    model_config = {"extra": "ignore"}


class SessionHandoff(BaseModel):
    board_notation: str = Field(..., description="FEN of the position to show.")
    played_moves: List[str] = Field(default_factory=list, description="Moves from move 1, in SAN or UCI.")
    game_result: Optional[HandoffGameResult] = None

    model_config = {"extra": "ignore"}
