from __future__ import annotations
from typing import Any, Dict, List, Mapping
from .types import RubricParam

Rubric = Mapping[str, RubricParam]

_PARAMS = [
    RubricParam("greeting", 5, "PASS_FAIL", "Call opening within 5 seconds"),
    RubricParam("collectionUrgency", 15, "SCORE", "Create urgency, cross-questioning"),
    RubricParam("rebuttalCustomerHandling", 15, "SCORE", "Address penalties, objections"),
    RubricParam("callEtiquette", 15, "SCORE", "Tone, empathy, clear speech"),
    RubricParam("callDisclaimer", 5, "PASS_FAIL", "Take permission before ending"),
    RubricParam("correctDisposition", 10, "PASS_FAIL", "Use correct category with remark"),
    RubricParam("callClosing", 5, "PASS_FAIL", "Thank the customer properly"),
    RubricParam("fatalIdentification", 5, "PASS_FAIL", "Missing agent/customer info"),
    RubricParam("fatalTapeDiscloser", 10, "PASS_FAIL", "Inform customer about recording"),
    RubricParam("fatalToneLanguage", 15, "PASS_FAIL", "No abusive or threatening speech"),
]

RUBRIC: Dict[str, RubricParam] = {p.key: p for p in _PARAMS}


def max_total(rubric: Rubric = RUBRIC) -> float:
    return sum(p.weight for p in rubric.values())


def rubric_payload(rubric: Rubric = RUBRIC) -> Dict[str, Any]:
    params: List[Dict[str, Any]] = [
        {"key": p.key, "weight": p.weight, "scoringType": p.scoring_type, "description": p.description}
        for p in rubric.values()
    ]
    return {"parameters": params, "maxTotal": max_total(rubric)}
