"""
Tagged validation results for the wire models.

Every ``validate_*`` helper accepts an arbitrary value and returns a
``ValidationResult``; malformed input is reported as field-level errors, never
raised.
"""

from typing import Any, Iterable, List, Optional, Type

from pydantic import BaseModel, ValidationError

from qa_canvas.models.document import QACanvasDocument
from qa_canvas.models.payloads import AnalyzeTicketRequest, TicketAnalysisPayload
from qa_canvas.models.qa_profile import QAProfile
from qa_canvas.models.suggestion import GenerateSuggestionsRequest, QASuggestion


class FieldError(BaseModel):
    path: str
    message: str
    code: Optional[str] = None


class ValidationResult(BaseModel):
    success: bool
    data: Optional[Any] = None
    errors: List[FieldError] = []

    @classmethod
    def ok(cls, data: Any) -> "ValidationResult":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, errors: List[FieldError]) -> "ValidationResult":
        return cls(success=False, errors=errors)


def format_error_path(loc) -> str:
    return ".".join(str(part) for part in loc) or "(root)"


def field_errors_from(errors: Iterable[dict], strip_prefix: Optional[str] = None) -> List[FieldError]:
    """Convert pydantic error dicts, optionally dropping a leading location part such as ``body``"""
    field_errors = []
    for err in errors:
        loc = tuple(err["loc"])
        if strip_prefix and loc[:1] == (strip_prefix,):
            loc = loc[1:]
        field_errors.append(FieldError(path=format_error_path(loc), message=err["msg"], code=err["type"]))
    return field_errors


def _validate(model: Type[BaseModel], value: Any) -> ValidationResult:
    try:
        return ValidationResult.ok(model.model_validate(value))
    except ValidationError as e:
        return ValidationResult.failed(field_errors_from(e.errors()))


def validate_qa_canvas_document(value: Any) -> ValidationResult:
    return _validate(QACanvasDocument, value)


def validate_qa_profile(value: Any) -> ValidationResult:
    return _validate(QAProfile, value)


def validate_ticket_analysis_payload(value: Any) -> ValidationResult:
    return _validate(TicketAnalysisPayload, value)


def validate_analyze_ticket_request(value: Any) -> ValidationResult:
    return _validate(AnalyzeTicketRequest, value)


def validate_qa_suggestion(value: Any) -> ValidationResult:
    return _validate(QASuggestion, value)


def validate_generate_suggestions_request(value: Any) -> ValidationResult:
    return _validate(GenerateSuggestionsRequest, value)
