"""
Coverage gap analysis over an existing QA Canvas document.

Used to steer suggestion generation toward what the document is missing.
"""

import re
from dataclasses import dataclass
from typing import List

from qa_canvas.models.document import (
    AcceptanceCriterion,
    CriterionPriority,
    GherkinTestCaseEntry,
    QACanvasDocument,
    Severity,
)
from qa_canvas.models.suggestion import SuggestionType

_STOP_WORDS = {"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "with", "by", "is", "are"}

NEGATIVE_PATTERNS = [
    "should not", "should fail", "error", "invalid", "incorrect",
    "reject", "deny", "prevent", "block", "negative",
]

EDGE_CASE_PATTERNS = [
    "edge case", "boundary", "limit", "maximum", "minimum", "empty",
    "null", "undefined", "special character", "overflow", "underflow",
]

VAGUE_TERMS = [
    "appropriate", "reasonable", "adequate", "sufficient", "suitable",
    "effective", "efficient", "optimal", "proper", "correct",
    "as needed", "as required", "as appropriate", "if necessary",
    "etc", "and so on", "various", "several", "many",
    "few", "some", "most", "fast", "slow", "quick", "large", "small",
]

_GAP_SUGGESTION_TYPES = {
    "edge_case": SuggestionType.EDGE_CASE,
    "ui": SuggestionType.UI_VERIFICATION,
    "ux": SuggestionType.UI_VERIFICATION,
    "negative": SuggestionType.NEGATIVE_TEST,
    "security": SuggestionType.SECURITY_TEST,
    "performance": SuggestionType.PERFORMANCE_TEST,
    "accessibility": SuggestionType.ACCESSIBILITY_TEST,
    "api": SuggestionType.INTEGRATION_TEST,
    "integration": SuggestionType.INTEGRATION_TEST,
    "database": SuggestionType.DATA_VALIDATION,
}


@dataclass(frozen=True)
class CoverageGap:
    category: str
    description: str
    severity: Severity
    suggested_action: str


@dataclass(frozen=True)
class VagueCriterion:
    criterion_id: str
    source: str
    text: str
    terms: List[str]
    clarification_question: str


def analyze_coverage_gaps(document: QACanvasDocument) -> List[CoverageGap]:
    """Find what the document's test cases leave untested.

    Reports acceptance criteria that no test case mentions, active profile
    categories without a test case, missing negative scenarios when functional
    testing is on, and the absence of any edge-case wording.
    """
    gaps: List[CoverageGap] = []
    profile = document.metadata.qa_profile
    test_texts = [entry.test_case.text().lower() for entry in document.test_cases]

    for criterion in document.acceptance_criteria:
        if _is_untested(criterion, test_texts):
            gaps.append(
                CoverageGap(
                    category=criterion.category.value,
                    description=f"Missing test coverage for acceptance criterion: {criterion.title}",
                    severity=Severity.HIGH if criterion.priority == CriterionPriority.MUST else Severity.MEDIUM,
                    suggested_action=(
                        f"Create a {profile.test_case_format.value} test case that verifies "
                        f'"{criterion.description}"'
                    ),
                )
            )

    covered = {entry.category.lower() for entry in document.test_cases}
    for category in profile.qa_categories.active():
        if category not in covered:
            gaps.append(
                CoverageGap(
                    category=category,
                    description=f"No test cases for active category: {category}",
                    severity=Severity.MEDIUM,
                    suggested_action=f"Add at least one test case for the {category} category",
                )
            )

    if profile.qa_categories.functional and not _has_negative_cases(document):
        gaps.append(
            CoverageGap(
                category="negative",
                description="Missing negative test scenarios",
                severity=Severity.HIGH,
                suggested_action="Add test cases for error conditions and invalid inputs",
            )
        )

    if not any(pattern in text for text in test_texts for pattern in EDGE_CASE_PATTERNS):
        gaps.append(
            CoverageGap(
                category="edge_case",
                description="Limited edge case coverage",
                severity=Severity.MEDIUM,
                suggested_action="Add test cases for boundary conditions and edge scenarios",
            )
        )

    return gaps


def find_vague_criteria(document: QACanvasDocument) -> List[VagueCriterion]:
    found = []
    for criterion in document.acceptance_criteria:
        terms = vague_terms(criterion.description)
        if terms:
            quoted = '", "'.join(terms)
            found.append(
                VagueCriterion(
                    criterion_id=criterion.id,
                    source=f"Acceptance Criterion: {criterion.title}",
                    text=criterion.description,
                    terms=terms,
                    clarification_question=(
                        f'Could you clarify what "{quoted}" means specifically in the context of "{criterion.title}"?'
                    ),
                )
            )
    return found


def vague_terms(text: str) -> List[str]:
    lowered = text.lower()
    return [term for term in VAGUE_TERMS if re.search(rf"\b{re.escape(term)}\b", lowered)]


def map_gap_to_suggestion_type(gap: CoverageGap) -> SuggestionType:
    category = gap.category.lower()
    if "edge" in category:
        return SuggestionType.EDGE_CASE
    return _GAP_SUGGESTION_TYPES.get(category, SuggestionType.FUNCTIONAL_TEST)


def keywords(text: str) -> List[str]:
    """Significant words of a title, punctuation stripped"""
    words = (re.sub(r"[^\w]", "", word) for word in text.split() if len(word) > 2)
    return [word.lower() for word in words if word and word.lower() not in _STOP_WORDS]


def _is_untested(criterion: AcceptanceCriterion, test_texts: List[str]) -> bool:
    terms = keywords(criterion.title)
    return not any(term in text for text in test_texts for term in terms)


def _has_negative_cases(document: QACanvasDocument) -> bool:
    for entry in document.test_cases:
        if entry.category.lower() == "negative":
            return True
        if isinstance(entry, GherkinTestCaseEntry):
            body = entry.test_case
            text = " ".join([*body.given, *body.when, *body.then]).lower()
            if any(pattern in text for pattern in NEGATIVE_PATTERNS):
                return True
    return False
