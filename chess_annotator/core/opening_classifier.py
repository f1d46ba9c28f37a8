# chess_annotator/core/opening_classifier.py
"""
Classifies the opening being played by longest-prefix matching on SAN tokens.

The classifier is a pure function of the played moves. It keeps no memory of
earlier classifications, so after an undo, redo or branch discard it simply
runs again on the new move list.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from chess_annotator.core.opening_book import OPENINGS, Opening
from chess_annotator.types import OpeningClassification


def _is_prefix(prefix: Sequence[str], tokens: Sequence[str]) -> bool:
    return len(prefix) <= len(tokens) and list(tokens[:len(prefix)]) == list(prefix)


def classify_opening(
    san_moves: Sequence[str], book: Iterable[Opening] = OPENINGS
) -> Optional[OpeningClassification]:
    """
    Finds the opening book entry with the longest move prefix matching the game.

    Root openings and all of their variations are scanned in book order; a
    later entry replaces the current best only if its prefix is strictly
    longer, so ties go to the entry scanned first.

    Args:
        san_moves: The SAN of every played move, from move 1.
        book: The opening database to match against.

    Returns:
        An `OpeningClassification` whose `name` is the matched entry's own
        name, or None if no moves were played or nothing matched.
    """
    tokens: List[str] = list(san_moves)
    if not tokens:
        return None

    best: Optional[Tuple[int, OpeningClassification]] = None
    for opening in book:
        root_prefix = opening.moves.split()
        if _is_prefix(root_prefix, tokens) and (best is None or len(root_prefix) > best[0]):
            best = (len(root_prefix), OpeningClassification(name=opening.name, variation="", family=opening.name))

        for variation in opening.variations:
            prefix = variation.moves.split()
            if _is_prefix(prefix, tokens) and (best is None or len(prefix) > best[0]):
                best = (len(prefix), OpeningClassification(
                    name=variation.name, variation=variation.name, family=opening.name
                ))

    return best[1] if best else None
