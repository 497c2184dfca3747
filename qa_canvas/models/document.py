"""
QA Canvas Document schema.

The document is the structured artifact produced for one ticket: a plain
language summary, configuration warnings, acceptance criteria and test cases in
one of three formats. Test cases form a discriminated union keyed by
``format``; each body model forbids unknown keys so a body can only ever
validate under its own tag.
"""

from abc import abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import ConfigDict, Field, field_validator

from qa_canvas.models.base import CamelModel
from qa_canvas.models.qa_profile import QAProfile


class WarningType(str, Enum):
    CATEGORY_MISMATCH = "category_mismatch"
    MISSING_CAPABILITY = "missing_capability"
    RECOMMENDATION = "recommendation"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CriterionPriority(str, Enum):
    MUST = "must"
    SHOULD = "should"
    COULD = "could"


class CriterionCategory(str, Enum):
    FUNCTIONAL = "functional"
    UI = "ui"
    UX = "ux"
    PERFORMANCE = "performance"
    SECURITY = "security"
    ACCESSIBILITY = "accessibility"
    API = "api"
    DATABASE = "database"


class TestCasePriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TicketSummary(CamelModel):
    problem: str = Field(..., min_length=1, description="What problem exists or what need is being addressed")
    solution: str = Field(..., min_length=1, description="What will be built or fixed to address the problem")
    context: str = Field(..., min_length=1, description="How this functionality fits into the broader system")


class ConfigurationWarning(CamelModel):
    type: WarningType = Field(..., description="Type of warning")
    title: str = Field(..., description="Warning title for display")
    message: str = Field(..., description="Detailed warning message explaining the issue")
    recommendation: str = Field(..., description="Specific recommendation to resolve the warning")
    severity: Severity = Field(default=Severity.MEDIUM, description="Warning severity level")


class AcceptanceCriterion(CamelModel):
    id: str = Field(..., description="Unique identifier for the criterion")
    title: str = Field(..., description="Brief title describing the criterion")
    description: str = Field(..., description="Detailed description of what must be satisfied")
    priority: CriterionPriority = Field(default=CriterionPriority.MUST, description="MoSCoW priority level")
    category: CriterionCategory = Field(..., description="Category of the acceptance criterion")
    testable: bool = Field(default=True, description="Whether this criterion can be directly tested")


class _TestCaseBody(CamelModel):
    model_config = ConfigDict(extra="forbid")

    @abstractmethod
    def text(self) -> str:
        """Plain text of the body, used for keyword matching and word counts"""


class TestStep(CamelModel):
    model_config = ConfigDict(extra="forbid")

    step_number: int = Field(..., description="Sequential step number")
    action: str = Field(..., description="Action to perform")
    expected_result: str = Field(..., description="Expected outcome of the action")
    notes: Optional[str] = Field(None, description="Additional notes or context for the step")


class GherkinTestCase(_TestCaseBody):
    scenario: str = Field(..., description="Scenario name/title")
    given: List[str] = Field(..., description="Given conditions (preconditions)")
    when: List[str] = Field(..., description="When actions (actions taken)")
    then: List[str] = Field(..., description="Then assertions (expected outcomes)")
    tags: List[str] = Field(default_factory=list, description="Tags for categorization (@smoke, @regression, etc.)")

    def text(self) -> str:
        return " ".join([self.scenario, *self.given, *self.when, *self.then])


class StepsTestCase(_TestCaseBody):
    title: str = Field(..., description="Test case title")
    objective: str = Field(..., description="What this test case aims to verify")
    preconditions: List[str] = Field(default_factory=list, description="Prerequisites before executing the test")
    steps: List[TestStep] = Field(..., description="Sequential test steps")
    postconditions: List[str] = Field(default_factory=list, description="Cleanup or verification after test completion")

    def text(self) -> str:
        return " ".join(
            [
                self.title,
                self.objective,
                *self.preconditions,
                *(f"{step.action} {step.expected_result}" for step in self.steps),
                *self.postconditions,
            ]
        )


class TableTestCase(_TestCaseBody):
    title: str = Field(..., description="Test case title")
    description: str = Field(..., description="Brief description of what is being tested")
    test_data: List[Dict[str, str]] = Field(..., description="Test data rows with key-value pairs")
    expected_outcome: str = Field(..., description="Overall expected outcome for the test case")
    notes: Optional[str] = Field(None, description="Additional notes about the test case")

    def text(self) -> str:
        return " ".join([self.title, self.description, self.expected_outcome, self.notes or ""])


class _TestCaseEnvelope(CamelModel):
    id: str = Field(..., description="Unique test case identifier")
    category: str = Field(..., description="Test category (functional, ui, negative, etc.)")
    priority: TestCasePriority = Field(default=TestCasePriority.MEDIUM, description="Test case priority")
    estimated_time: Optional[str] = Field(None, description="Estimated execution time")


class GherkinTestCaseEntry(_TestCaseEnvelope):
    format: Literal["gherkin"]
    test_case: GherkinTestCase


class StepsTestCaseEntry(_TestCaseEnvelope):
    format: Literal["steps"]
    test_case: StepsTestCase


class TableTestCaseEntry(_TestCaseEnvelope):
    format: Literal["table"]
    test_case: TableTestCase


TestCase = Annotated[
    Union[GherkinTestCaseEntry, StepsTestCaseEntry, TableTestCaseEntry],
    Field(discriminator="format"),
]


class DocumentMetadata(CamelModel):
    generated_at: str = Field(..., description="ISO timestamp when document was generated")
    qa_profile: QAProfile = Field(..., description="QA profile used for generation")
    ticket_id: str = Field(..., description="Jira ticket ID/key")
    document_version: str = Field(default="1.0", description="Document version for tracking changes")
    ai_model: Optional[str] = Field(None, description='AI model used for generation (e.g., "gpt-4o")')
    generation_time: Optional[float] = Field(None, description="Time taken to generate document in milliseconds")
    word_count: Optional[int] = Field(None, description="Approximate word count of generated content")
    regeneration_reason: Optional[str] = Field(None, description="Why the document was (re)generated")


class QACanvasDocument(CamelModel):
    """Full structure of AI-generated QA documentation"""

    ticket_summary: TicketSummary = Field(..., description="Simplified explanation of the ticket in plain language")
    configuration_warnings: List[ConfigurationWarning] = Field(
        default_factory=list, description="Warnings about configuration conflicts"
    )
    acceptance_criteria: List[AcceptanceCriterion] = Field(
        ..., description="List of acceptance criteria derived from the ticket"
    )
    test_cases: List[TestCase] = Field(..., description="Generated test cases in the specified format")
    metadata: DocumentMetadata = Field(..., description="Metadata about document generation and configuration")

    @field_validator("acceptance_criteria", "test_cases")
    @classmethod
    def ids_must_be_unique(cls, items):
        seen = set()
        duplicates = []
        for item in items:
            if item.id in seen and item.id not in duplicates:
                duplicates.append(item.id)
            seen.add(item.id)
        if duplicates:
            raise ValueError(f"duplicate ids: {', '.join(duplicates)}")
        return items


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_minimal_document(ticket_id: str, qa_profile: QAProfile) -> QACanvasDocument:
    """Build an empty but valid document for a ticket.

    Used when generation cannot proceed so callers still get a document of the
    right shape. The summary carries placeholders naming the ticket because
    summary fields must be non-empty.
    """
    return QACanvasDocument(
        ticket_summary=TicketSummary(
            problem=f"Analysis pending for {ticket_id}",
            solution="Solution details are not available yet",
            context="Context details are not available yet",
        ),
        configuration_warnings=[],
        acceptance_criteria=[],
        test_cases=[],
        metadata=DocumentMetadata(
            generated_at=utc_now_iso(),
            qa_profile=qa_profile,
            ticket_id=ticket_id,
            document_version="1.0",
        ),
    )
