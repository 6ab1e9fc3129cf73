# call_core/prompt.py
from __future__ import annotations
from .rubrics import RUBRIC, Rubric
from .types import fmt_number

SYSTEM_PROMPT = "You are a professional call center quality analyst. Respond only with valid JSON."

_HEADER = (
    "You are an expert call center quality analyst. Analyze this call recording transcription "
    "and evaluate it based on the following parameters:"
)

_RULES = (
    "SCORING RULES:\n"
    "- For PASS_FAIL parameters: Score is either 0 (fail) or the full weight value (pass)\n"
    "- For SCORE parameters: Score can be any number between 0 and the weight value"
)


def _parameter_lines(rubric: Rubric) -> str:
    return "\n".join(
        f"- {p.key} ({p.scoring_type}, weight: {fmt_number(p.weight)}): {p.description}"
        for p in rubric.values()
    )


def _schema(rubric: Rubric) -> str:
    score_lines = ",\n".join(f'    "{p.key}": {p.score_range()}' for p in rubric.values())
    return (
        "{\n"
        '  "scores": {\n'
        f"{score_lines}\n"
        "  },\n"
        '  "overallFeedback": "<detailed feedback about the call performance>",\n'
        '  "observation": "<specific observations about customer interactions, objections handled, etc.>"\n'
        "}"
    )


def build_prompt(rubric: Rubric = RUBRIC, transcript: str = "") -> str:
    """Render the rubric and transcript into one scoring instruction.

    Pure: the same rubric and transcript always give the same string.  The
    transcript goes in verbatim; nothing in it is escaped or filtered.
    """
    return "\n\n".join([
        _HEADER,
        "EVALUATION PARAMETERS:\n" + _parameter_lines(rubric),
        _RULES,
        f'TRANSCRIPTION:\n"{transcript}"',
        "Please provide your analysis in the following JSON format:\n" + _schema(rubric),
        "Provide only the JSON response, no additional text.",
    ])
