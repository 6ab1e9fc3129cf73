from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Tuple
ScoringType = Literal["PASS_FAIL", "SCORE"]
SCORING_TYPES: Tuple[str, ...] = ("PASS_FAIL", "SCORE")
@dataclass(frozen=True)
class RubricParam:
    key: str
    weight: float
    scoring_type: ScoringType
    description: str

    def score_range(self) -> str:
        w = fmt_number(self.weight)
        return f"<0 or {w}>" if self.scoring_type == "PASS_FAIL" else f"<0-{w}>"
@dataclass(frozen=True)
class Upload:
    filename: str; content_type: str; data: bytes

    @property
    def size(self) -> int:
        return len(self.data)
@dataclass(frozen=True)
class AnalysisResult:
    scores: Dict[str, Any]
    overall_feedback: str
    observation: str
    missing: Tuple[str, ...] = field(default=(), compare=False)
    adjusted: Tuple[str, ...] = field(default=(), compare=False)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "scores": dict(self.scores),
            "overallFeedback": self.overall_feedback,
            "observation": self.observation,
        }
def fmt_number(x: float) -> str:
    return str(int(x)) if float(x).is_integer() else str(x)
