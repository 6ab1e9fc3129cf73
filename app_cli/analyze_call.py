from __future__ import annotations
import argparse, asyncio, json, logging, mimetypes, sys
from pathlib import Path
from call_core import config
from call_core.errors import CallAuditError
from call_core.llm_bridge import GroqProvider
from call_core.pipeline import run_analysis, validate_upload
from call_core.provider_cfg import settings
from call_core.reporting import export_report_html, summarize
from call_core.types import AnalysisResult, Upload
def load_upload(path: str) -> Upload:
    p = Path(path)
    ctype = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
    return Upload(filename=p.name, content_type=ctype, data=p.read_bytes())
async def analyze(upload: Upload, provider: GroqProvider) -> AnalysisResult:
    try:
        return await run_analysis(upload, provider)
    finally:
        await provider.aclose()
def print_table(summary: dict) -> None:
    for r in summary["parameters"]:
        score = "-" if r["missing"] else f"{r['score']:g}"
        print(f"  {r['key']:<26} {r['scoringType']:<9} {score:>5}/{r['max']:<3} {r['band']}")
    print(f"  {'TOTAL':<26} {'':<9} {summary['total']:>5g}/{summary['maxTotal']:<3} ({summary['percent']}%)")
    print("\nOverall feedback:\n  " + summary["overallFeedback"])
    print("\nObservation:\n  " + summary["observation"])
def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Transcribe and score one call recording.")
    ap.add_argument("audio", help="path to an .mp3 or .wav recording")
    ap.add_argument("--json", action="store_true", help="print the raw analysis JSON instead of a table")
    ap.add_argument("--html", metavar="PATH", help="also write an HTML report to PATH")
    args = ap.parse_args(argv)
    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO), format="[%(levelname)s] %(message)s")
    try:
        upload = validate_upload(load_upload(args.audio))
        provider = GroqProvider(settings())
        result = asyncio.run(analyze(upload, provider))
    except CallAuditError as e:
        print(f"Error: {e.message} ({e.kind}: {e.detail})", file=sys.stderr)
        return 2 if e.status_code == 400 else 1
    except OSError as e:
        print(f"Error: cannot read {args.audio}: {e.strerror or e}", file=sys.stderr)
        return 2
    if args.json:
        print(json.dumps(result.to_payload(), indent=2))
    else:
        print_table(summarize(result))
    if args.html:
        print(f"Report saved to: {export_report_html(result, args.html)}")
    return 0
if __name__ == "__main__": sys.exit(main())
