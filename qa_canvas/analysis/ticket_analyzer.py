"""
Ticket Analysis

Heuristic analysis of Jira tickets that runs before any model call: a plain
language summary, conflicts between ticket content and the QA profile, the
active test categories and a rough complexity estimate. All functions are pure.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set

from pydantic import Field

from qa_canvas.analysis import rules
from qa_canvas.models.base import CamelModel
from qa_canvas.models.document import ConfigurationWarning, Severity, TicketSummary, WarningType
from qa_canvas.models.qa_profile import QAProfile, TestCaseFormat
from qa_canvas.models.ticket import JiraComment, JiraTicket


class AnalysisWarningType(str, Enum):
    QA_CATEGORY_MISMATCH = "qa_category_mismatch"
    FORMAT_RECOMMENDATION = "format_recommendation"


_DOCUMENT_WARNING_TYPES = {
    AnalysisWarningType.QA_CATEGORY_MISMATCH: WarningType.CATEGORY_MISMATCH,
    AnalysisWarningType.FORMAT_RECOMMENDATION: WarningType.RECOMMENDATION,
}


class AnalysisWarning(CamelModel):
    type: AnalysisWarningType
    title: str
    message: str
    recommendation: str
    severity: Severity = Field(default=Severity.MEDIUM)

    def to_document_warning(self) -> ConfigurationWarning:
        return ConfigurationWarning(
            type=_DOCUMENT_WARNING_TYPES[self.type],
            title=self.title,
            message=self.message,
            recommendation=self.recommendation,
            severity=self.severity,
        )


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class CategoryCheck:
    signal: str
    category: str
    severity: Severity
    title: str
    message: str
    recommendation: str

    def warning(self) -> AnalysisWarning:
        return AnalysisWarning(
            type=AnalysisWarningType.QA_CATEGORY_MISMATCH,
            title=self.title,
            message=self.message,
            recommendation=self.recommendation,
            severity=self.severity,
        )


# Evaluated in order; each check emits at most one warning
CATEGORY_CHECKS: List[CategoryCheck] = [
    CategoryCheck(
        signal=rules.API,
        category="api",
        severity=Severity.HIGH,
        title="API Testing Recommended",
        message="This ticket appears to involve API changes or integrations, but API testing is disabled in your QA profile.",
        recommendation="Consider enabling API testing category to ensure comprehensive coverage of backend functionality.",
    ),
    CategoryCheck(
        signal=rules.SECURITY,
        category="security",
        severity=Severity.HIGH,
        title="Security Testing Recommended",
        message="This ticket involves authentication, authorization, or credential handling, but security testing is disabled in your QA profile.",
        recommendation="Enable security testing category to ensure proper validation of security controls.",
    ),
    CategoryCheck(
        signal=rules.MOBILE,
        category="mobile",
        severity=Severity.MEDIUM,
        title="Mobile Testing Recommended",
        message="This ticket affects mobile functionality or responsive design, but mobile testing is disabled in your QA profile.",
        recommendation="Enable mobile testing category to ensure cross-device compatibility.",
    ),
    CategoryCheck(
        signal=rules.DATABASE,
        category="database",
        severity=Severity.HIGH,
        title="Database Testing Recommended",
        message="This ticket involves database changes or data operations, but database testing is disabled.",
        recommendation="Enable database testing category to cover data integrity, migrations, and query performance.",
    ),
    CategoryCheck(
        signal=rules.PERFORMANCE,
        category="performance",
        severity=Severity.MEDIUM,
        title="Performance Testing Recommended",
        message="This ticket may impact system performance or involves large data operations.",
        recommendation="Consider enabling performance testing to validate response times and resource usage.",
    ),
    CategoryCheck(
        signal=rules.ACCESSIBILITY,
        category="accessibility",
        severity=Severity.MEDIUM,
        title="Accessibility Testing Recommended",
        message="This ticket involves UI changes that may affect accessibility compliance.",
        recommendation="Enable accessibility testing to ensure WCAG compliance and inclusive design.",
    ),
]

GHERKIN_RECOMMENDATION = AnalysisWarning(
    type=AnalysisWarningType.FORMAT_RECOMMENDATION,
    title="Gherkin Format Recommended",
    message="This user story would benefit from Gherkin format for better stakeholder communication.",
    recommendation="Consider using Gherkin format (Given-When-Then) for clearer business requirement validation.",
    severity=Severity.LOW,
)

TABLE_RECOMMENDATION = AnalysisWarning(
    type=AnalysisWarningType.FORMAT_RECOMMENDATION,
    title="Table Format Recommended",
    message="This data-focused ticket would benefit from table format for systematic data validation.",
    recommendation="Consider using table format for comprehensive data scenario coverage.",
    severity=Severity.LOW,
)

_UNSET_VALUES = {"", "none", "unassigned"}


def analyze_ticket_content(ticket: JiraTicket) -> TicketSummary:
    """Extract a problem, solution and context summary from a ticket"""
    return TicketSummary(
        problem=_extract_problem(ticket),
        solution=_extract_solution(ticket),
        context=_extract_context(ticket),
    )


def detect_configuration_conflicts(ticket: JiraTicket, qa_profile: QAProfile) -> List[AnalysisWarning]:
    """Warn where the ticket needs testing the QA profile has switched off"""
    found = ticket_signals(ticket)
    warnings = [
        check.warning()
        for check in CATEGORY_CHECKS
        if check.signal in found and not getattr(qa_profile.qa_categories, check.category)
    ]

    format_warning = _recommend_format(found, qa_profile)
    if format_warning:
        warnings.append(format_warning)
    return warnings


def generate_test_case_categories(qa_profile: QAProfile) -> List[str]:
    """Active categories in canonical order"""
    return qa_profile.qa_categories.active()


def estimate_test_complexity(ticket: JiraTicket) -> Complexity:
    """Estimate test effort from keyword signals and description length.

    The side with the larger total weight wins; a tie (including no signals at
    all) is ``medium``. An empty or very short description counts as a low
    signal, so a bare "Update" ticket comes out ``low``.
    """
    weights = rules.signal_weights(rules.COMPLEXITY_RULES, ticket.content)
    high = weights.get(rules.COMPLEXITY_HIGH, 0)
    low = weights.get(rules.COMPLEXITY_LOW, 0)

    description_length = len(ticket.description.strip())
    if description_length > rules.LONG_DESCRIPTION_CHARS:
        high += rules.LONG_DESCRIPTION_WEIGHT
    elif description_length < rules.SHORT_DESCRIPTION_CHARS:
        low += rules.SHORT_DESCRIPTION_WEIGHT

    if high > low:
        return Complexity.HIGH
    if low > high:
        return Complexity.LOW
    return Complexity.MEDIUM


def ticket_signals(ticket: JiraTicket) -> Set[str]:
    """All rule signals raised by a ticket's content, components and type"""
    found = rules.signals(rules.CONTENT_RULES, [ticket.content])
    found |= rules.signals(rules.COMPONENT_RULES, ticket.components)
    found |= rules.signals(rules.ISSUE_TYPE_RULES, [ticket.issue_type])
    return found


def is_defect(ticket: JiraTicket) -> bool:
    return bool(
        rules.signals(rules.ISSUE_TYPE_RULES, [ticket.issue_type]) & {rules.DEFECT_TYPE}
        or rules.signals(rules.PROBLEM_RULES, [ticket.summary])
    )


def _recommend_format(found: Set[str], qa_profile: QAProfile) -> Optional[AnalysisWarning]:
    if rules.USER_STORY_TYPE in found and qa_profile.test_case_format != TestCaseFormat.GHERKIN:
        return GHERKIN_RECOMMENDATION
    if rules.DATA_HEAVY in found and qa_profile.test_case_format != TestCaseFormat.TABLE:
        return TABLE_RECOMMENDATION
    return None


def _truncate(text: str, limit: int) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def _subject(ticket: JiraTicket) -> str:
    """Stripped summary, falling back to the issue key when the summary is blank"""
    return ticket.summary.strip() or ticket.issue_key


def _extract_problem(ticket: JiraTicket) -> str:
    summary = _subject(ticket)

    if not is_defect(ticket):
        subject = re.sub(r"^implement(ing)?\s+", "", summary, flags=re.IGNORECASE)
        return f"Need to implement {subject}"

    problem = summary
    if not rules.signals(rules.PROBLEM_RULES, [summary]):
        problem = f"Problem observed: {summary}"

    # Add the opening of the description when it says more than the summary
    lines = [line.strip() for line in ticket.description.splitlines() if line.strip()][:2]
    lead = " ".join(lines)[:200].strip()
    if lead and lead.lower()[:50] not in problem.lower():
        problem = f"{problem.rstrip('.')}. {lead}"
    return problem


def _best_comment(comments: List[JiraComment]) -> Optional[JiraComment]:
    best = None
    best_score = 0
    # Later comments win ties
    for comment in comments:
        score = sum(rules.signal_weights(rules.ACTIONABLE_RULES, comment.body).values())
        if score and score >= best_score:
            best, best_score = comment, score
    return best


def _extract_solution(ticket: JiraTicket) -> str:
    comment = _best_comment(ticket.comments)
    if comment:
        return _truncate(comment.body, 200)

    description = ticket.description
    if is_defect(ticket):
        for sentence in re.split(r"[.!?]+", description):
            if sentence.strip() and rules.signals(rules.ACTIONABLE_RULES, [sentence]):
                return sentence.strip()
        return f"Fix the issue described in: {_subject(ticket)}"

    paragraphs = [p for p in description.split("\n\n") if len(p.strip()) > 20]
    if paragraphs:
        return _truncate(paragraphs[0], 300)
    return f"Implement the feature as described in: {_subject(ticket)}"


def _extract_context(ticket: JiraTicket) -> str:
    parts: List[str] = []

    if ticket.components:
        parts.append(f"Affects components: {', '.join(ticket.components)}")

    priority = re.sub(r"^\s*priority:\s*", "", ticket.priority, flags=re.IGNORECASE).strip()
    if priority.lower() not in _UNSET_VALUES:
        parts.append(f"Priority: {priority}")

    custom = [
        f"{key}: {value.strip()}"
        for key, value in ticket.custom_fields.items()
        if isinstance(value, str) and value.strip()
    ][:2]
    if custom:
        parts.append(", ".join(custom))

    if ticket.assignee and ticket.assignee.strip().lower() not in _UNSET_VALUES:
        parts.append(f"Assigned to: {ticket.assignee.strip()}")

    if parts:
        return ". ".join(parts)
    return f"General development task: {_subject(ticket)}"
