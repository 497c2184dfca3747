import uuid
from enum import Enum
from typing import List, Optional

from pydantic import Field

from qa_canvas.models.base import CamelModel
from qa_canvas.models.document import QACanvasDocument


class SuggestionType(str, Enum):
    EDGE_CASE = "edge_case"
    UI_VERIFICATION = "ui_verification"
    FUNCTIONAL_TEST = "functional_test"
    CLARIFICATION_QUESTION = "clarification_question"
    NEGATIVE_TEST = "negative_test"
    PERFORMANCE_TEST = "performance_test"
    SECURITY_TEST = "security_test"
    ACCESSIBILITY_TEST = "accessibility_test"
    INTEGRATION_TEST = "integration_test"
    DATA_VALIDATION = "data_validation"


class SuggestionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EstimatedEffort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SuggestionDraft(CamelModel):
    """Shape requested from the model for a single suggestion"""

    suggestion_type: SuggestionType = Field(..., description="The category of the QA suggestion")
    title: str = Field(..., description="Brief, actionable title for the suggestion")
    description: str = Field(..., description="Detailed explanation of what should be done and why")
    target_section: Optional[str] = Field(None, description="Specific document section this applies to")
    priority: SuggestionPriority = Field(default=SuggestionPriority.MEDIUM, description="How important this suggestion is")
    reasoning: str = Field(..., description="Why this suggestion is valuable for QA coverage")
    implementation_hint: Optional[str] = Field(None, description="Hint on how to address this suggestion")
    estimated_effort: Optional[EstimatedEffort] = Field(None, description="Estimated effort to implement")
    tags: List[str] = Field(default_factory=list, description="Tags for categorization and filtering")


class QASuggestion(CamelModel):
    id: str = Field(..., description="Unique identifier for the suggestion")
    suggestion_type: SuggestionType = Field(..., description="Category of the QA suggestion")
    title: str = Field(..., description="Brief title summarizing the suggestion")
    description: str = Field(..., description="Detailed text of the suggestion for the user")
    target_section: Optional[str] = Field(
        None, description='Document section this applies to (e.g., "Acceptance Criteria", "Test Cases")'
    )
    priority: SuggestionPriority = Field(default=SuggestionPriority.MEDIUM, description="Priority level of this suggestion")
    reasoning: str = Field(..., description="Why this suggestion is important or relevant")
    implementation_hint: Optional[str] = Field(None, description="Hint on how to implement or address this suggestion")
    related_requirements: List[str] = Field(default_factory=list, description="Requirement IDs this suggestion relates to")
    estimated_effort: Optional[EstimatedEffort] = Field(None, description="Estimated effort to implement this suggestion")
    tags: List[str] = Field(default_factory=list, description="Tags for categorization and filtering")


class QASuggestionsResponse(CamelModel):
    suggestions: List[QASuggestion] = Field(..., description="Generated QA suggestions")
    total_count: int = Field(..., description="Total number of suggestions generated")
    generated_at: str = Field(..., description="ISO timestamp when suggestions were generated")
    context_summary: str = Field(..., description="Summary of the document context used for generation")


class GenerateSuggestionsRequest(CamelModel):
    current_document: QACanvasDocument = Field(..., description="The QA canvas document to improve")
    max_suggestions: int = Field(default=3, ge=1, le=10, description="Maximum number of suggestions to generate")
    focus_areas: Optional[List[SuggestionType]] = Field(None, description="Suggestion types to focus on")
    exclude_types: List[SuggestionType] = Field(default_factory=list, description="Suggestion types to exclude")
    request_id: Optional[str] = Field(None, description="Optional request ID for tracking")


def create_qa_suggestion(draft: SuggestionDraft, related_requirements: Optional[List[str]] = None) -> QASuggestion:
    """Turn a model-produced draft into a suggestion with a fresh id"""
    return QASuggestion(
        id=f"suggestion-{uuid.uuid4().hex[:12]}",
        related_requirements=related_requirements or [],
        **draft.model_dump(),
    )
