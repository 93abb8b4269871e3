# backend/aimak/ai/errors.py
"""
Error taxonomy for every AI-backed feature.

Each error carries an HTTP status and a machine-readable ``code`` so the admin
UI can tell "service not configured" apart from "temporarily unavailable" and
"invalid input". ``main.py`` renders them as ``{"detail", "code"}``.
"""

from typing import Sequence


class AIServiceError(Exception):
    status_code: int = 502
    code: str = "ai_error"
    default_message: str = "AI service error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AIValidationError(AIServiceError):
    status_code = 400
    code = "invalid_input"
    default_message = "Invalid input for AI request"


class AIConfigurationError(AIServiceError):
    status_code = 503
    code = "ai_not_configured"
    default_message = (
        "AI service is not configured. Please set GEMINI_API_KEY or OPENROUTER_API_KEY environment variable."
    )


class AIProviderError(AIServiceError):
    """Every configured provider failed (network, non-2xx, blocked, empty)."""

    status_code = 502
    code = "ai_unavailable"
    default_message = "AI service is temporarily unavailable. Please try again later."

    def __init__(self, message: str | None = None, failures: Sequence = ()):
        super().__init__(message)
        self.failures = list(failures)

    def has_failure(self, kind) -> bool:
        return any(f.kind == kind for f in self.failures)


class AIResponseFormatError(AIServiceError):
    status_code = 502
    code = "ai_invalid_response"
    default_message = "AI returned a response in an unexpected format. Please try again."


class AITranslationFormatError(AIResponseFormatError):
    default_message = "Translation returned invalid format. Please try again."


class AIContentBlockedError(AIServiceError):
    status_code = 422
    code = "ai_content_blocked"
    default_message = "The AI safety filter blocked this content."


class AINoCandidatesError(AIServiceError):
    status_code = 502
    code = "ai_no_candidates"
    default_message = "The AI service returned no response candidates. Please try again."
