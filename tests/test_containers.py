# tests/test_containers.py
from chess_annotator.config.settings import Settings
from chess_annotator.containers import create_coordinator, get_container
from chess_annotator.orchestration.analysis_coordinator import AnalysisCoordinator
from chess_annotator.orchestration.game_session import GameSession
from chess_annotator.services.analysis_client import HttpAnalysisClient
from chess_annotator.types import AnalysisService, RulesEngine


def test_container_wires_collaborators():
    container = get_container(Settings())

    first = container.resolve(GameSession)
    second = container.resolve(GameSession)

    assert first is not second
    assert first.session_id != second.session_id
    assert container.resolve(RulesEngine) is container.resolve(RulesEngine)
    assert isinstance(container.resolve(AnalysisService), HttpAnalysisClient)
    assert container.resolve(AnalysisService) is container.resolve(AnalysisService)


def test_sessions_from_container_are_independent():
    container = get_container(Settings())
    first = container.resolve(GameSession)
    second = container.resolve(GameSession)

    first.apply_move("e4")

    assert second.snapshot.played == ()


def test_create_coordinator_binds_session():
    container = get_container(Settings())
    session = container.resolve(GameSession)

    assert isinstance(create_coordinator(container, session), AnalysisCoordinator)
