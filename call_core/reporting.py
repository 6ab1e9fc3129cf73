# call_core/reporting.py
from __future__ import annotations
import html
from pathlib import Path
from typing import Any, Dict, List

from .rubrics import RUBRIC, Rubric, max_total
from .types import AnalysisResult, fmt_number

# score / weight at or above these ratios
BAND_GOOD = 0.8
BAND_FAIR = 0.6

def band(score: float, weight: float) -> str:
    ratio = score / weight if weight else 0.0
    if ratio >= BAND_GOOD: return "good"
    if ratio >= BAND_FAIR: return "fair"
    return "poor"

def summarize(result: AnalysisResult, rubric: Rubric = RUBRIC) -> Dict[str, Any]:
    """Per-parameter rows and totals, with maxima read from the rubric only.

    Keys the reply omitted count as 0 and are flagged ``missing``.
    """
    rows: List[Dict[str, Any]] = []
    total = 0.0
    for key, p in rubric.items():
        present = key in result.scores
        score = float(result.scores[key]) if present else 0.0
        total += score
        rows.append({
            "key": key,
            "scoringType": p.scoring_type,
            "score": score,
            "max": p.weight,
            "band": band(score, p.weight),
            "missing": not present,
        })
    top = max_total(rubric)
    return {
        "parameters": rows,
        "total": total,
        "maxTotal": top,
        "percent": round(100.0 * total / top, 1) if top else 0.0,
        "overallFeedback": result.overall_feedback,
        "observation": result.observation,
    }

def _render_html(summary: Dict[str, Any], title: str) -> str:
    esc = html.escape
    rows = []
    for r in summary["parameters"]:
        score_txt = "-" if r["missing"] else fmt_number(r["score"])
        rows.append(
            f"<tr class='{r['band']}'><td>{esc(r['key'])}</td><td>{r['scoringType']}</td>"
            f"<td>{score_txt}/{fmt_number(r['max'])}</td></tr>"
        )
    table = (
        "<table border='1' cellpadding='6' cellspacing='0'>"
        "<thead><tr><th>Parameter</th><th>Type</th><th>Score</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
    )
    total = f"{fmt_number(summary['total'])}/{fmt_number(summary['maxTotal'])} ({summary['percent']}%)"
    return (
        "<!doctype html><html><head><meta charset='utf-8'>"
        f"<title>{esc(title)}</title>"
        "<style>.good{background:#dcfce7}.fair{background:#fef9c3}.poor{background:#fee2e2}</style>"
        "</head><body>"
        f"<h1>{esc(title)}</h1><p><b>Total:</b> {total}</p>{table}"
        f"<h2>Overall Feedback</h2><p>{esc(summary['overallFeedback'])}</p>"
        f"<h2>Observation</h2><p>{esc(summary['observation'])}</p>"
        "</body></html>"
    )

def export_report_html(result: AnalysisResult, out_path: str, title: str = "Call Audit Report",
                       rubric: Rubric = RUBRIC) -> str:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(_render_html(summarize(result, rubric), title), encoding="utf-8")
    return str(p)
