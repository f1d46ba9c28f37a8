# chess_annotator/orchestration/analysis_coordinator.py
"""
Connects a `GameSession` to the asynchronous analysis backend.

Analysis never blocks session mutation, so a response can arrive after the
position it was requested for has been replaced. The coordinator remembers
the board notation at request time and discards any response whose position
is no longer the one the session shows.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar, TYPE_CHECKING

import structlog

from chess_annotator.services.analysis_models import BestMove, MoveEvaluation, PositionAnalysis
from chess_annotator.types import FEN
from chess_annotator.utils import metrics

if TYPE_CHECKING:
    from chess_annotator.config.settings import AnalysisServiceSettings
    from chess_annotator.orchestration.game_session import GameSession
    from chess_annotator.types import AnalysisService

logger = structlog.get_logger(__name__)

ResultT = TypeVar("ResultT")


class AnalysisCoordinator:
    """Issues analysis requests for a session and filters out stale responses."""

    def __init__(
        self, session: "GameSession", service: "AnalysisService", settings: "AnalysisServiceSettings"
    ):
        self._session = session
        self._service = service
        self._settings = settings

    def _accept(self, origin: FEN, result: Optional[ResultT], endpoint: str) -> Optional[ResultT]:
        if result is None:
            return None
        if not self._session.is_current(origin):
            metrics.STALE_ANALYSIS_DISCARDED_TOTAL.labels(endpoint=endpoint).inc()
            logger.info("Discarding stale analysis response.", endpoint=endpoint, origin=origin)
            return None
        return result

    async def _analyze(self, origin: FEN, depth: Optional[int]) -> Optional[PositionAnalysis]:
        result = await self._service.analyze(origin, depth or self._settings.search_depth)
        return self._accept(origin, result, "analyze")

    async def analyze_current(self, depth: Optional[int] = None) -> Optional[PositionAnalysis]:
        """Analyzes the current position; None if unavailable or stale on arrival."""
        return await self._analyze(self._session.snapshot.position.notation, depth)

    async def best_move_for_current(self, depth: Optional[int] = None) -> Optional[BestMove]:
        origin = self._session.snapshot.position.notation
        result = await self._service.best_move(origin, depth or self._settings.search_depth)
        return self._accept(origin, result, "best_move")

    async def evaluate_last_move(self, depth: Optional[int] = None) -> Optional[MoveEvaluation]:
        """
        Asks the backend to judge the last played move.

        Returns None when there is no last move, or when the shown position is
        not the direct result of that move (a loaded position).
        """
        snapshot = self._session.snapshot
        last = snapshot.last_move
        previous = self._session.previous_position
        if last is None or previous is None or last.resulting_position != snapshot.position:
            return None

        origin = snapshot.position.notation
        result = await self._service.evaluate_move(
            previous.notation, last.uci, depth or self._settings.search_depth
        )
        return self._accept(origin, result, "evaluate_move")

    def request_analysis(
        self, on_result: Callable[[PositionAnalysis], None], depth: Optional[int] = None
    ) -> "asyncio.Task[None]":
        """
        Fire-and-forget analysis of the current position.

        The origin position is captured now, before the task runs, and
        `on_result` is only called if the session still shows it on arrival.
        Must be called from a running event loop.
        """
        origin = self._session.snapshot.position.notation
        return asyncio.get_running_loop().create_task(self._deliver(self._analyze(origin, depth), on_result))

    @staticmethod
    async def _deliver(pending: Awaitable[Optional[ResultT]], on_result: Callable[[ResultT], None]) -> None:
        result = await pending
        if result is not None:
            on_result(result)
