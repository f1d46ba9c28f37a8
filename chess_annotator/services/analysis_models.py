# chess_annotator/services/analysis_models.py
"""
Request and response contracts for the position-analysis backend.

Responses are validated with Pydantic so that a malformed payload is caught
inside the client instead of reaching the session. Field aliases accept both
the camelCase names of the current backend and the older names it used to
send (`quality`, `reason`, `scoreDiff`, `{from, to}` best moves).
"""

from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

# --- Requests ---

class AnalyzeRequest(BaseModel):
    fen: str = Field(..., description="FEN of the position to analyze")
    depth: int = Field(..., ge=1)

    model_config = {"extra": "forbid"}


class EvaluateMoveRequest(BaseModel):
    fen: str = Field(..., description="FEN of the position before the move")
    move: str = Field(..., description="The move in UCI notation")
    depth: int = Field(..., ge=1)

    model_config = {"extra": "forbid"}

# --- Responses ---

class PositionAnalysis(BaseModel):
    """Engine evaluation of a position. `score` is in pawn units from White's point of view."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    score: float
    best_move_uci: Optional[str] = Field(None, validation_alias=AliasChoices("bestMoveUci", "bestMove"))
    best_move_san: Optional[str] = Field(None, validation_alias=AliasChoices("bestMoveSan"))
    depth: int
    principal_variation_uci: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("principalVariationUci", "pv")
    )
    principal_variation_san: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("principalVariationSan", "pvSan")
    )


class BestMove(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    move_uci: str = Field(..., validation_alias=AliasChoices("moveUci", "move"))

    @model_validator(mode="before")
    @classmethod
    def accept_from_to(cls, data: Any) -> Any:
        """Older backends answer with separate `from` and `to` squares."""
        if isinstance(data, dict) and "from" in data and "to" in data and "moveUci" not in data:
            return {"moveUci": f"{data['from']}{data['to']}{data.get('promotion') or ''}"}
        return data


class MoveEvaluation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    quality_label: str = Field("", validation_alias=AliasChoices("qualityLabel", "quality"))
    explanation: str = Field("", validation_alias=AliasChoices("explanation", "reason"))
    score_before: float = Field(0.0, validation_alias=AliasChoices("scoreBefore"))
    score_after: float = Field(0.0, validation_alias=AliasChoices("scoreAfter"))
    score_delta: Optional[float] = Field(None, validation_alias=AliasChoices("scoreDelta", "scoreDiff"))

    @model_validator(mode="after")
    def fill_score_delta(self) -> "MoveEvaluation":
        if self.score_delta is None:
            self.score_delta = self.score_after - self.score_before
        return self


def describe_score(score: float) -> str:
    """Renders a pawn-unit score with the labels shown next to the evaluation bar."""
    if score > 100:
        return "白方必胜"
    if score < -100:
        return "黑方必胜"

    formatted = f"{abs(score):.2f}"
    if score > 0:
        return f"白方领先 +{formatted}"
    if score < 0:
        return f"黑方领先 +{formatted}"
    return "局面均势"
