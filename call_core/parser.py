from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, List, Tuple

from . import config
from .errors import MalformedResponse
from .rubrics import RUBRIC, Rubric
from .types import AnalysisResult, RubricParam

log = logging.getLogger(__name__)

_OPEN_FENCE_RX = re.compile(r"^```[A-Za-z0-9_+.-]*")
_CLOSE_FENCE = "```"
_TEXT_FIELDS = ("overallFeedback", "observation")


def strip_code_fences(text: str) -> str:
    """Remove a code-block wrapper the model may put around its JSON.

    Handles an opening fence with or without a language tag and a closing
    fence, each independently.  Text without fences comes back trimmed.
    """
    cleaned = (text or "").strip()
    opened = _OPEN_FENCE_RX.match(cleaned)
    if opened:
        cleaned = cleaned[opened.end():]
    if cleaned.endswith(_CLOSE_FENCE):
        cleaned = cleaned[: -len(_CLOSE_FENCE)]
    return cleaned.strip()


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _bring_into_range(param: RubricParam, value: float) -> float:
    if param.scoring_type == "PASS_FAIL":
        return param.weight if value >= param.weight / 2 else 0
    return max(0, min(param.weight, value))


def _in_range(param: RubricParam, value: float) -> bool:
    if param.scoring_type == "PASS_FAIL":
        return value == 0 or value == param.weight
    return 0 <= value <= param.weight


def _check_scores(
    scores: Dict[str, Any], rubric: Rubric, policy: str, raw: str
) -> Tuple[Dict[str, Any], List[str], List[str]]:
    checked = dict(scores)
    missing: List[str] = []
    adjusted: List[str] = []
    for key, param in rubric.items():
        if key not in scores:
            missing.append(key)
            continue
        value = scores[key]
        if not _is_number(value):
            raise MalformedResponse(f"score for {key!r} is not a number: {value!r}", raw=raw)
        if _in_range(param, value):
            continue
        if policy == "reject":
            raise MalformedResponse(
                f"score for {key!r} out of range for {param.scoring_type} (weight {param.weight}): {value!r}",
                raw=raw,
            )
        checked[key] = _bring_into_range(param, value)
        adjusted.append(key)
    return checked, missing, adjusted


def parse_analysis(raw: str, rubric: Rubric = RUBRIC, policy: str | None = None) -> AnalysisResult:
    """Parse the model's reply into an ``AnalysisResult``.

    Missing rubric keys are tolerated and reported on ``result.missing``.
    Out-of-range values follow ``policy``: ``clamp`` brings them into range,
    ``reject`` raises ``MalformedResponse``.
    """
    policy = (policy or config.SCORE_RANGE_POLICY).lower()
    if policy not in config.SCORE_POLICIES:
        raise ValueError(f"unknown score range policy: {policy}")

    cleaned = strip_code_fences(raw)
    try:
        data = json.loads(cleaned)
    except (TypeError, ValueError) as e:
        raise MalformedResponse(f"reply is not valid JSON: {e}", raw=raw) from e

    if not isinstance(data, dict):
        raise MalformedResponse(f"reply is {type(data).__name__}, expected an object", raw=raw)
    scores = data.get("scores")
    if not isinstance(scores, dict):
        raise MalformedResponse("reply has no 'scores' object", raw=raw)
    for name in _TEXT_FIELDS:
        if not isinstance(data.get(name), str):
            raise MalformedResponse(f"reply has no {name!r} string", raw=raw)

    checked, missing, adjusted = _check_scores(scores, rubric, policy, raw)
    if missing:
        log.warning("analysis reply omitted rubric keys: %s", ", ".join(missing))
    if adjusted:
        log.warning("analysis reply had out-of-range scores, clamped: %s", ", ".join(adjusted))

    return AnalysisResult(
        scores=checked,
        overall_feedback=data["overallFeedback"],
        observation=data["observation"],
        missing=tuple(missing),
        adjusted=tuple(adjusted),
    )
