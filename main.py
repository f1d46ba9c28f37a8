# main.py
"""
The command-line entry point for the Chess Annotator session core.

Plays a move list from the initial position (or a supplied FEN), optionally
walks back and forth through the history, and prints the resulting session
snapshot and handoff JSON.

Usage:
  python main.py e4 e5 Nf3
  python main.py --fen "4k3/8/8/8/8/8/4P3/4K3 w - - 0 1" e3 --undo 1
  python main.py e4 e5 --analyze
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from chess_annotator.config.settings import Settings
from chess_annotator.containers import create_coordinator, get_container
from chess_annotator.orchestration.game_session import GameSession
from chess_annotator.services.analysis_models import describe_score
from chess_annotator.types import AnalysisService, SessionResult, SessionSnapshot
from chess_annotator.utils.logging_config import setup_logging


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play, undo and classify chess moves.")
    parser.add_argument("moves", nargs="*", help="Moves in SAN or UCI, from the start (or --fen) position")
    parser.add_argument("--fen", help="Load this position before playing moves")
    parser.add_argument("--history", nargs="*", default=None, help="Move list to seed together with --fen")
    parser.add_argument("--undo", type=int, default=0, help="Number of moves to undo afterwards")
    parser.add_argument("--redo", type=int, default=0, help="Number of moves to redo after undoing")
    parser.add_argument("--analyze", action="store_true", help="Ask the analysis backend about the final position")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser.parse_args(argv)


def format_snapshot(snapshot: SessionSnapshot) -> str:
    by_white, by_black = snapshot.captured.as_lists()
    result = snapshot.game_result
    opening = snapshot.opening
    lines = [
        f"Position:   {snapshot.position.notation}",
        f"Moves:      {' '.join(snapshot.played) or '-'}",
        f"Undo/Redo:  {snapshot.can_undo}/{snapshot.can_redo}",
        f"Captured:   white took [{' '.join(p.value for p in by_white)}], "
        f"black took [{' '.join(p.value for p in by_black)}], "
        f"balance {snapshot.captured.material_balance:+.0f}",
        f"Check:      {snapshot.is_check}",
        f"Result:     {'over' if result.is_over else 'ongoing'}"
        + (f", winner {result.winner} ({result.reason.value if result.reason else '-'})" if result.is_over else "")
        + (f", mated king on {result.terminal_square}" if result.terminal_square else ""),
        f"Opening:    {opening.name + ' / ' + opening.family if opening else '-'}",
    ]
    return "\n".join(lines)


def _report(result: SessionResult, action: str) -> bool:
    if not result.ok:
        print(f"{action} failed: {result.error}", file=sys.stderr)
    return result.ok


async def _analyze(container, session: GameSession) -> None:
    coordinator = create_coordinator(container, session)
    analysis = await coordinator.analyze_current()
    if analysis is None:
        print("Analysis:   unavailable")
    else:
        print(f"Analysis:   {describe_score(analysis.score)}, best {analysis.best_move_san or analysis.best_move_uci}")
    await container.resolve(AnalysisService).close()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = Settings()
    setup_logging(log_level=args.log_level or settings.log_level, json_output=settings.log_json)

    container = get_container(settings)
    session: GameSession = container.resolve(GameSession)

    if args.fen and not _report(session.load_position(args.fen, args.history), "Loading position"):
        return 2

    for move in args.moves:
        if not _report(session.apply_move(move), f"Move {move!r}"):
            return 1

    for _ in range(args.undo):
        _report(session.undo(), "Undo")
    for _ in range(args.redo):
        _report(session.redo(), "Redo")

    print(format_snapshot(session.snapshot))
    print(f"Handoff:    {session.export_handoff().model_dump_json()}")

    if args.analyze:
        asyncio.run(_analyze(container, session))
    return 0


if __name__ == "__main__":
    sys.exit(main())
