from __future__ import annotations
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import logging

from call_core import config
from call_core.errors import GENERIC_MESSAGE, CallAuditError
from call_core.llm_bridge import Provider, build_provider
from call_core.pipeline import require_provider, run_analysis, validate_upload
from call_core.rubrics import RUBRIC, rubric_payload
from call_core.types import Upload

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO),
                    format="[%(levelname)s] %(name)s: %(message)s")
log = logging.getLogger("call_audit.api")

# ---- Schemas ----
class RubricParamOut(BaseModel):
    key: str
    weight: float
    scoringType: str
    description: str

class RubricOut(BaseModel):
    parameters: list[RubricParamOut]
    maxTotal: float

# ---- Dependencies ----
def get_provider(request: Request) -> Provider | None:
    return request.app.state.provider

# ---- Error mapping ----
async def _call_audit_error(request: Request, exc: CallAuditError) -> JSONResponse:
    cause = exc.__cause__
    if exc.status_code < 500:
        log.info("rejected %s %s: %s", request.method, request.url.path, exc.detail)
    else:
        log.error("%s failed at stage=%s kind=%s: %s%s", request.url.path, exc.stage, exc.kind, exc.detail,
                  f" (cause: {cause!r})" if cause else "")
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)

async def _request_invalid(request: Request, exc: RequestValidationError) -> JSONResponse:
    log.info("rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse({"error": "No audio file provided"}, status_code=400)

async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unexpected error processing %s", request.url.path, exc_info=exc)
    return JSONResponse({"error": GENERIC_MESSAGE}, status_code=500)

async def _read_upload(audio: UploadFile | None) -> Upload | None:
    if audio is None:
        return None
    try:
        data = await audio.read()
    finally:
        await audio.close()
    return Upload(filename=audio.filename or "", content_type=audio.content_type or "", data=data)


def create_app(provider: Provider | None = None) -> FastAPI:
    app = FastAPI(title="Call Audit API")
    app.state.provider = provider if provider is not None else build_provider()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.CORS_ALLOW_ORIGINS),
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )
    app.add_exception_handler(CallAuditError, _call_audit_error)
    app.add_exception_handler(RequestValidationError, _request_invalid)
    app.add_exception_handler(Exception, _unexpected_error)

    @app.get("/")
    def root():
        return {"status": "ok", "service": config.SERVICE_NAME}

    # ---- Health ----
    @app.get("/health")
    def health(request: Request):
        prov = request.app.state.provider
        return {
            "provider": config.PROVIDER_LABEL,
            "configured": prov is not None,
            "transcribe_model": config.TRANSCRIBE_MODEL,
            "analysis_model": config.ANALYSIS_MODEL,
            "score_range_policy": config.SCORE_RANGE_POLICY,
        }

    @app.get("/rubric", response_model=RubricOut)
    def rubric():
        return rubric_payload(RUBRIC)

    # ---- Analysis ----
    @app.post("/analyze")
    async def analyze(
        audio: UploadFile | None = File(None),
        provider: Provider | None = Depends(get_provider),
    ):
        upload = validate_upload(await _read_upload(audio))
        prov = require_provider(provider)
        result = await run_analysis(upload, prov, RUBRIC)
        return JSONResponse(result.to_payload())

    @app.options("/analyze")
    def analyze_preflight():
        return {}

    return app


app = create_app()
