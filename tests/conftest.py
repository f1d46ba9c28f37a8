# tests/conftest.py
import pytest

from chess_annotator.orchestration.game_session import GameSession
from chess_annotator.services.rules_engine import PythonChessRulesEngine


@pytest.fixture
def engine():
    return PythonChessRulesEngine()


@pytest.fixture
def session(engine):
    return GameSession(engine, session_id="test-session")


@pytest.fixture
def play(session):
    """Plays every move on the session fixture and fails on the first rejection."""
    def _play(moves):
        result = None
        for move in moves:
            result = session.apply_move(move)
            assert result.ok, f"{move} rejected: {result.error}"
        return result
    return _play
