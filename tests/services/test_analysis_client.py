# tests/services/test_analysis_client.py
import json

import httpx
import pytest

from chess_annotator.config.settings import AnalysisServiceSettings
from chess_annotator.services.analysis_client import (ANALYZE_ENDPOINT, EVALUATE_MOVE_ENDPOINT,
                                                      HttpAnalysisClient)
from chess_annotator.services.analysis_models import BestMove, MoveEvaluation, describe_score
from chess_annotator.types import STARTING_FEN


def _client(handler, **overrides):
    """Builds a client whose HTTP traffic is answered by `handler`."""
    settings = AnalysisServiceSettings(retry_attempts=2, initial_backoff_s=0.0, **overrides)
    transport = httpx.MockTransport(handler)
    return HttpAnalysisClient(settings, client=httpx.AsyncClient(transport=transport, base_url="http://engine"))


@pytest.mark.asyncio
async def test_analyze_posts_fen_and_depth():
    # Arrange
    seen = []

    def handler(request):
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={
            "score": 0.35, "bestMoveUci": "e2e4", "bestMoveSan": "e4", "depth": 12,
            "principalVariationUci": ["e2e4", "e7e5"], "principalVariationSan": ["e4", "e5"],
        })

    client = _client(handler)

    # Act
    analysis = await client.analyze(STARTING_FEN, 12)

    # Assert
    assert seen == [(ANALYZE_ENDPOINT, {"fen": STARTING_FEN, "depth": 12})]
    assert analysis.score == 0.35
    assert analysis.best_move_uci == "e2e4"
    assert analysis.principal_variation_san == ["e4", "e5"]


@pytest.mark.asyncio
async def test_default_depth_comes_from_settings():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content)["depth"])
        return httpx.Response(200, json={"moveUci": "g1f3"})

    client = _client(handler, search_depth=7)
    await client.best_move(STARTING_FEN)

    assert seen == [7]


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, expected", [
    ({"moveUci": "g1f3"}, "g1f3"),
    ({"move": "e2e4"}, "e2e4"),
    ({"from": "e7", "to": "e8", "promotion": "q"}, "e7e8q"),
])
async def test_best_move_accepts_old_and_new_field_names(payload, expected):
    client = _client(lambda request: httpx.Response(200, json=payload))

    result = await client.best_move(STARTING_FEN)

    assert isinstance(result, BestMove)
    assert result.move_uci == expected


@pytest.mark.asyncio
async def test_evaluate_move_sends_previous_position_and_move():
    seen = []

    def handler(request):
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={
            "quality": "好棋", "reason": "占据中心", "scoreBefore": 0.2, "scoreAfter": 0.5,
        })

    client = _client(handler)
    result = await client.evaluate_move(STARTING_FEN, "e2e4", 10)

    assert seen == [(EVALUATE_MOVE_ENDPOINT, {"fen": STARTING_FEN, "move": "e2e4", "depth": 10})]
    assert isinstance(result, MoveEvaluation)
    assert result.quality_label == "好棋"
    assert result.explanation == "占据中心"
    assert result.score_delta == pytest.approx(0.3)


@pytest.mark.asyncio
async def test_transient_errors_are_retried_then_give_up():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    assert await client.analyze(STARTING_FEN) is None
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_transient_error_then_success():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json={"moveUci": "d2d4"})

    client = _client(handler)

    result = await client.best_move(STARTING_FEN)

    assert result.move_uci == "d2d4"
    assert len(calls) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "engine crashed"}),
    httpx.Response(200, text="<html>oops</html>"),
    httpx.Response(200, json={"bestMoveUci": "e2e4"}),
])
async def test_failures_become_none(response):
    calls = []

    def handler(request):
        calls.append(request)
        return response

    client = _client(handler)

    assert await client.analyze(STARTING_FEN) is None
    # Non-transient failures are not retried.
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_disabled_service_sends_nothing():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"moveUci": "e2e4"})

    client = _client(handler, enabled=False)

    assert await client.best_move(STARTING_FEN) is None
    assert calls == []


@pytest.mark.asyncio
async def test_close_leaves_borrowed_client_open():
    borrowed = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    async with HttpAnalysisClient(AnalysisServiceSettings(), client=borrowed):
        pass
    assert not borrowed.is_closed
    await borrowed.aclose()


@pytest.mark.parametrize("score, label", [
    (150.0, "白方必胜"),
    (-150.0, "黑方必胜"),
    (1.5, "白方领先 +1.50"),
    (-0.25, "黑方领先 +0.25"),
    (0.0, "局面均势"),
])
def test_describe_score(score, label):
    assert describe_score(score) == label
