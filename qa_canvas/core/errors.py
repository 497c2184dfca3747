"""
Error taxonomy for document generation and the structured error bodies the API returns.

``classify_ai_error`` maps any exception raised while talking to a model
provider onto an ``AIErrorType`` and HTTP status. Matching is done on the
lowercased exception message, first rule wins.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog

from qa_canvas.config.settings import settings
from qa_canvas.models.base import CamelModel
from qa_canvas.models.validation import FieldError

logger = structlog.get_logger()


class AIErrorType(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AI_GENERATION_ERROR = "AI_GENERATION_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    CONTEXT_LIMIT_ERROR = "CONTEXT_LIMIT_ERROR"
    CONTENT_FILTER_ERROR = "CONTENT_FILTER_ERROR"


class QACanvasError(Exception):
    """Base class for errors raised by this service"""


class GenerationError(QACanvasError):
    """The model call did not produce a usable result"""

    def __init__(self, message: str, provider: Optional[str] = None, model: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
        self.model = model


class SchemaValidationError(GenerationError):
    """Model output could not be parsed into the requested schema"""


class ProviderError(GenerationError):
    """The provider SDK or transport failed"""


class ProviderNotConfiguredError(ProviderError):
    """No API key is configured for the selected provider"""


class ErrorResponse(CamelModel):
    error: AIErrorType
    message: str
    details: Optional[Any] = None
    retry_after: Optional[int] = None
    request_id: Optional[str] = None
    error_code: Optional[str] = None
    retryable: bool = True
    provider: Optional[str] = None
    model: Optional[str] = None
    suggestions: List[str] = []


@dataclass(frozen=True)
class ErrorRule:
    error: AIErrorType
    status: int
    error_code: str
    message: str
    details: Optional[str]
    retryable: bool
    suggestions: List[str] = field(default_factory=list)
    matches: Callable[[str], bool] = lambda text: False


def _any_of(*terms: str) -> Callable[[str], bool]:
    return lambda text: any(term in text for term in terms)


GENERATION_RULE = ErrorRule(
    error=AIErrorType.AI_GENERATION_ERROR,
    status=500,
    error_code="GEN_FAILURE",
    message="Failed to generate structured QA documentation",
    details="The AI model was unable to generate a valid document structure",
    retryable=True,
    suggestions=[
        "Try simplifying the request",
        "Check if the input data is properly formatted",
        "Try again in a few moments",
    ],
    matches=_any_of("failed to generate", "no object generated"),
)

PROVIDER_RULE = ErrorRule(
    error=AIErrorType.PROVIDER_ERROR,
    status=502,
    error_code="PROVIDER_ERROR",
    message="AI provider service error",
    details="The AI service provider encountered an error processing your request",
    retryable=True,
    suggestions=[
        "Try again in a few moments",
        "Check the AI provider status page for service issues",
        "Try switching to an alternative AI provider if available",
    ],
    matches=_any_of("openai", "gemini", "google", "provider"),
)

INTERNAL_RULE = ErrorRule(
    error=AIErrorType.INTERNAL_SERVER_ERROR,
    status=500,
    error_code="INTERNAL_ERROR",
    message="An unexpected error occurred while processing your request",
    details=None,
    retryable=True,
    suggestions=[
        "Try your request again",
        "If the problem persists, contact support with the request ID",
    ],
)

# Evaluated in order against the lowercased exception message
ERROR_RULES: List[ErrorRule] = [
    GENERATION_RULE,
    ErrorRule(
        error=AIErrorType.RATE_LIMIT_ERROR,
        status=429,
        error_code="RATE_LIMIT",
        message="AI service rate limit exceeded",
        details="Please try again in a few moments",
        retryable=True,
        suggestions=[
            "Wait for the suggested retry period",
            "Try reducing the complexity of your request",
            "Contact your administrator if this persists",
        ],
        matches=_any_of("rate limit", "quota"),
    ),
    ErrorRule(
        error=AIErrorType.CONTEXT_LIMIT_ERROR,
        status=413,
        error_code="TOKEN_LIMIT",
        message="Input too large for AI processing",
        details="The ticket data exceeds the token limit.",
        retryable=True,
        suggestions=[
            "Try reducing the content or excluding comments/attachments",
            "Split the request into smaller chunks",
            "Remove non-essential information from the ticket",
        ],
        matches=lambda text: "token" in text and "limit" in text,
    ),
    ErrorRule(
        error=AIErrorType.AUTHENTICATION_ERROR,
        status=401,
        error_code="AUTH_ERROR",
        message="Authentication failed with AI provider",
        details="The system was unable to authenticate with the AI service",
        retryable=False,
        suggestions=[
            "Check if API keys are correctly configured",
            "Verify that your account has access to the requested model",
            "Contact your administrator to verify API credentials",
        ],
        matches=_any_of("auth", "key", "unauthorized", "permission"),
    ),
    ErrorRule(
        error=AIErrorType.TIMEOUT_ERROR,
        status=504,
        error_code="TIMEOUT",
        message="AI request timed out",
        details="The request took too long to process and was terminated",
        retryable=True,
        suggestions=[
            "Try again with a simpler request",
            "Break down your request into smaller parts",
            "Try again during a less busy time",
        ],
        matches=_any_of("timeout", "timed out"),
    ),
    ErrorRule(
        error=AIErrorType.CONTENT_FILTER_ERROR,
        status=422,
        error_code="CONTENT_FILTER",
        message="Content filtered by AI provider",
        details="The request was rejected due to content policy violations",
        retryable=False,
        suggestions=[
            "Review your input for potentially problematic content",
            "Modify your request to comply with content policies",
            "Contact support if you believe this is an error",
        ],
        matches=lambda text: "content" in text and any(t in text for t in ("filter", "policy", "moderation")),
    ),
    PROVIDER_RULE,
]


def _rule_for(exc: Exception) -> ErrorRule:
    if isinstance(exc, SchemaValidationError):
        return GENERATION_RULE
    text = str(exc).lower()
    for rule in ERROR_RULES:
        if rule.matches(text):
            return rule
    if isinstance(exc, ProviderError):
        return PROVIDER_RULE
    if isinstance(exc, GenerationError):
        return GENERATION_RULE
    return INTERNAL_RULE


def extract_provider(text: str) -> Optional[str]:
    lowered = text.lower()
    for provider in ("openai", "gemini", "anthropic"):
        if provider in lowered:
            return provider
    return None


def extract_model(text: str) -> Optional[str]:
    match = re.search(r"gpt-4o|gpt-\d+(?:\.\d+)?(?:-\w+)?|gemini-\d+(?:\.\d+)?(?:-\w+)?|claude-\d+(?:\.\d+)?", text, re.IGNORECASE)
    return match.group(0).lower() if match else None


def retry_after_seconds(text: str) -> int:
    lowered = text.lower()
    match = re.search(r"retry after (\d+)", lowered)
    if match:
        return int(match.group(1))
    if "rate limit" in lowered:
        return 60
    if "quota" in lowered:
        return 3600
    return 30


def classify_ai_error(exc: Exception, request_id: Optional[str] = None) -> Tuple[int, ErrorResponse]:
    """Map an exception to an HTTP status and structured error body"""
    return _error_response(_rule_for(exc), exc, request_id)


def internal_error_response(exc: Exception, request_id: Optional[str] = None) -> Tuple[int, ErrorResponse]:
    """500 body for exceptions that escaped every route handler"""
    return _error_response(INTERNAL_RULE, exc, request_id)


def _error_response(rule: ErrorRule, exc: Exception, request_id: Optional[str]) -> Tuple[int, ErrorResponse]:
    text = str(exc)

    provider = getattr(exc, "provider", None) or extract_provider(text)
    model = getattr(exc, "model", None) or extract_model(text)
    details = rule.details
    if rule is INTERNAL_RULE and settings.debug:
        details = text

    logger.error(
        "AI operation failed",
        error_type=rule.error.value,
        status=rule.status,
        error=text,
        exception=type(exc).__name__,
        request_id=request_id,
    )

    return rule.status, ErrorResponse(
        error=rule.error,
        message=rule.message,
        details=details,
        retry_after=retry_after_seconds(text) if rule.error == AIErrorType.RATE_LIMIT_ERROR else None,
        request_id=request_id,
        error_code=rule.error_code,
        retryable=rule.retryable,
        provider=provider,
        model=model if rule is not INTERNAL_RULE else None,
        suggestions=list(rule.suggestions),
    )


def _validation_suggestions(issues: List[FieldError]) -> List[str]:
    codes = {issue.code or "" for issue in issues}
    suggestions = []
    if "missing" in codes:
        suggestions.append("Check for missing required fields in your request")
    if codes & {"enum", "literal_error", "union_tag_invalid", "union_tag_not_found"}:
        suggestions.append("Verify that enum values match the expected options")
    if any(code.startswith("string_") for code in codes):
        suggestions.append("Ensure string formats (dates, emails, etc.) are correctly formatted")
    suggestions.append("Review the API documentation for correct payload structure")
    suggestions.append("Validate your JSON structure before sending")
    return suggestions


def validation_error_response(issues: List[FieldError], request_id: Optional[str] = None) -> Tuple[int, ErrorResponse]:
    """400 body listing every invalid field, also grouped by field path"""
    grouped: Dict[str, List[Dict[str, Optional[str]]]] = {}
    for issue in issues:
        grouped.setdefault(issue.path, []).append({"message": issue.message, "code": issue.code})

    return 400, ErrorResponse(
        error=AIErrorType.VALIDATION_ERROR,
        message="Invalid request payload",
        details={
            "issues": [{"field": issue.path, "message": issue.message, "code": issue.code} for issue in issues],
            "groupedByField": grouped,
        },
        request_id=request_id,
        error_code="VALIDATION_ERROR",
        retryable=True,
        suggestions=_validation_suggestions(issues),
    )
