# chess_annotator/services/analysis_client.py
"""
Provides an HTTP implementation of the `AnalysisService` protocol.

The analysis backend is advisory: the session works without it. Every failure
(connection errors, timeouts, bad status codes, malformed payloads) is caught
inside this client, logged, and turned into a `None` result, so nothing here
can affect Move History, captures or termination state. Transient transport
errors are retried with exponential backoff before giving up.
"""

from typing import Any, Dict, Optional, Type, TypeVar, TYPE_CHECKING

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from chess_annotator.exceptions import AnalysisServiceError
from chess_annotator.services.analysis_models import (AnalyzeRequest, BestMove, EvaluateMoveRequest,
                                                      MoveEvaluation, PositionAnalysis)
from chess_annotator.types import FEN, AnalysisService
from chess_annotator.utils import metrics
from chess_annotator.utils.retry import retry_with_backoff

if TYPE_CHECKING:
    from chess_annotator.config.settings import AnalysisServiceSettings

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

ANALYZE_ENDPOINT = "/api/analyze"
BEST_MOVE_ENDPOINT = "/api/best-move"
EVALUATE_MOVE_ENDPOINT = "/api/evaluate-move"


class HttpAnalysisClient(AnalysisService):
    """An `httpx`-based client for the position-analysis backend."""

    def __init__(self, settings: "AnalysisServiceSettings", client: Optional[httpx.AsyncClient] = None):
        """
        Initializes the client.

        Args:
            settings: Connection, depth and retry settings.
            client: An existing `httpx.AsyncClient` to reuse; one is created
                    from `settings` if omitted and closed by `close()`.
        """
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=settings.base_url, timeout=settings.timeout_s)

    async def __aenter__(self) -> "HttpAnalysisClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # --- Public API: always returns None instead of raising ---

    async def analyze(self, board_notation: FEN, search_depth: Optional[int] = None) -> Optional[PositionAnalysis]:
        payload = AnalyzeRequest(fen=board_notation, depth=search_depth or self._settings.search_depth)
        return await self._request_or_none(ANALYZE_ENDPOINT, payload.model_dump(), PositionAnalysis)

    async def best_move(self, board_notation: FEN, search_depth: Optional[int] = None) -> Optional[BestMove]:
        payload = AnalyzeRequest(fen=board_notation, depth=search_depth or self._settings.search_depth)
        return await self._request_or_none(BEST_MOVE_ENDPOINT, payload.model_dump(), BestMove)

    async def evaluate_move(
        self, board_notation_before: FEN, move_uci: str, search_depth: Optional[int] = None
    ) -> Optional[MoveEvaluation]:
        payload = EvaluateMoveRequest(
            fen=board_notation_before, move=move_uci, depth=search_depth or self._settings.search_depth
        )
        return await self._request_or_none(EVALUATE_MOVE_ENDPOINT, payload.model_dump(), MoveEvaluation)

    # --- Internals ---

    async def _request_or_none(
        self, endpoint: str, payload: Dict[str, Any], model: Type[ModelT]
    ) -> Optional[ModelT]:
        if not self._settings.enabled:
            return None
        try:
            result = await self._request(endpoint, payload, model)
        except AnalysisServiceError as e:
            metrics.ANALYSIS_REQUESTS_TOTAL.labels(endpoint=endpoint, outcome="unavailable").inc()
            logger.warning("Analysis unavailable.", endpoint=endpoint, reason=str(e))
            return None
        metrics.ANALYSIS_REQUESTS_TOTAL.labels(endpoint=endpoint, outcome="ok").inc()
        return result

    async def _request(self, endpoint: str, payload: Dict[str, Any], model: Type[ModelT]) -> ModelT:
        """
        Sends one request (with retries) and validates the response.

        Raises:
            AnalysisServiceError: On any network, HTTP or payload failure.
        """
        send = retry_with_backoff(
            attempts=self._settings.retry_attempts,
            initial_backoff_s=self._settings.initial_backoff_s,
            endpoint=endpoint,
        )(self._send)

        try:
            data = await send(endpoint, payload)
        except httpx.HTTPStatusError as e:
            raise AnalysisServiceError(f"{endpoint} answered HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise AnalysisServiceError(f"{endpoint} request failed: {e!r}") from e
        except ValueError as e:
            raise AnalysisServiceError(f"{endpoint} returned a non-JSON body") from e

        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise AnalysisServiceError(f"{endpoint} returned a malformed payload: {e.error_count()} error(s)") from e

    async def _send(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        logger.debug("Sending analysis request.", endpoint=endpoint)
        response = await self._client.post(endpoint, json=payload)
        response.raise_for_status()
        return response.json()
