"""Error taxonomy for the audit pipeline.

Every failure the service can report is a ``CallAuditError``.  Each class
carries the HTTP status and the public message the API answers with; the
detailed cause stays on the exception (``__cause__``, ``stage``, ``raw``)
and only reaches the server log.
"""

from __future__ import annotations

GENERIC_MESSAGE = "Failed to process audio file"


class CallAuditError(Exception):
    status_code: int = 500
    kind: str = "internal"

    def __init__(self, detail: str = "", *, message: str | None = None) -> None:
        super().__init__(detail or self.kind)
        self.detail = detail
        self.message = message or GENERIC_MESSAGE
        self.stage: str | None = None


class ValidationError(CallAuditError):
    """The upload itself is unusable; the caller can fix it."""

    status_code = 400
    kind = "validation"

    def __init__(self, message: str) -> None:
        super().__init__(message, message=message)


class ConfigurationError(CallAuditError):
    """The provider credential is missing; the operator can fix it."""

    kind = "configuration"

    def __init__(self, detail: str = "", *, label: str = "Groq") -> None:
        super().__init__(detail, message=f"{label} API key not configured")


class UpstreamError(CallAuditError):
    kind = "upstream"


class UpstreamUnavailable(UpstreamError):
    kind = "upstream_unavailable"


class TranscriptionFailed(UpstreamError):
    kind = "transcription_failed"


class AnalysisFailed(UpstreamError):
    kind = "analysis_failed"


class EmptyResponse(UpstreamError):
    kind = "empty_response"


class UpstreamTimeout(UpstreamError):
    kind = "timeout"


class MalformedResponse(CallAuditError):
    kind = "malformed_response"

    def __init__(self, detail: str, *, raw: str = "") -> None:
        super().__init__(detail)
        self.raw = raw
