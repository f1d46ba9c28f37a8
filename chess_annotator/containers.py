# chess_annotator/containers.py
"""
Defines the Dependency Injection (DI) container for the application.

This module uses the `punq` library to manage the creation and wiring of the
Rules Engine, the analysis client and game sessions. This centralizes the
dependency graph, making it easy to swap collaborators in tests.
"""

import punq

from chess_annotator.config.settings import AnalysisServiceSettings, SessionSettings, Settings
from chess_annotator.orchestration.analysis_coordinator import AnalysisCoordinator
from chess_annotator.orchestration.game_session import GameSession
from chess_annotator.services.analysis_client import HttpAnalysisClient
from chess_annotator.services.rules_engine import PythonChessRulesEngine
from chess_annotator.types import AnalysisService, RulesEngine


def get_container(settings: Settings) -> punq.Container:
    """
    Initializes and returns a DI container configured from `settings`.

    Every `GameSession` resolved from the container is a fresh session; the
    Rules Engine and the analysis client are shared singletons.
    """
    container = punq.Container()

    container.register(Settings, instance=settings)
    container.register(AnalysisServiceSettings, instance=settings.analysis_service)
    container.register(SessionSettings, instance=settings.session)

    # The rules engine is stateless, so one instance serves every session.
    container.register(RulesEngine, instance=PythonChessRulesEngine())
    container.register(
        AnalysisService,
        factory=lambda: HttpAnalysisClient(settings.analysis_service),
        scope=punq.Scope.singleton,
    )
    container.register(
        GameSession,
        factory=lambda: GameSession(container.resolve(RulesEngine), settings=settings.session),
    )

    return container


def create_coordinator(container: punq.Container, session: GameSession) -> AnalysisCoordinator:
    """Binds the container's analysis client to one specific session."""
    return AnalysisCoordinator(
        session,
        container.resolve(AnalysisService),
        container.resolve(AnalysisServiceSettings),
    )
