"""Prompt assembly for document and suggestion generation."""

from typing import List, Optional, Sequence

from qa_canvas.analysis.coverage import CoverageGap, VagueCriterion, map_gap_to_suggestion_type
from qa_canvas.analysis.test_case_formatter import (
    TestCaseCount,
    generate_category_test_suggestions,
    generate_format_prompt_guidance,
)
from qa_canvas.analysis.ticket_analyzer import AnalysisWarning
from qa_canvas.models.document import QACanvasDocument, TicketSummary
from qa_canvas.models.qa_profile import QAProfile
from qa_canvas.models.suggestion import SuggestionType
from qa_canvas.models.ticket import JiraTicket

COMMENT_PREVIEW_CHARS = 200

ANALYSIS_SYSTEM_PROMPT = """You are a world-class QA analyst tasked with creating comprehensive test documentation.

Your role is to:
1. Analyze Jira tickets and translate technical requirements into clear, testable documentation
2. Generate acceptance criteria and test cases based on the ticket content and QA profile
3. Identify potential issues, edge cases, and testing gaps
4. Provide structured, actionable QA documentation

Always follow these principles:
- Write clear, unambiguous acceptance criteria
- Create comprehensive test cases covering happy paths, edge cases, and error scenarios
- Consider the user experience and business impact
- Ensure all requirements are testable and measurable"""

UNCERTAINTY_INSTRUCTIONS = """## Uncertainty Handling Instructions:

Some of the input data is ambiguous. Please follow these guidelines:

1. When making assumptions:
   - Document any assumptions in the configurationWarnings section
   - Provide clear recommendations for how to address these issues
   - Ensure the generated document is still useful despite ambiguities

2. For conflicting requirements:
   - Prioritize the most likely interpretation based on the ticket content
   - Document alternative interpretations in the configurationWarnings section

3. For missing information:
   - Generate the best possible document with available information
   - Clearly indicate where more information would improve the results"""

SUGGESTION_SYSTEM_PROMPT = """You are a senior QA analyst and testing expert. Your role is to analyze QA documentation and provide specific, actionable suggestions to improve test coverage and quality.

## Suggestion Guidelines:
- **Be Specific**: Provide concrete, actionable recommendations rather than generic advice
- **Explain Value**: Clearly articulate why each suggestion improves quality or coverage
- **Consider Context**: Tailor suggestions to the specific ticket, technology, and business domain
- **Prioritize Impact**: Focus on suggestions that provide the highest value for testing effort
- **Stay Practical**: Ensure suggestions can be realistically implemented by the QA team

## Types of Suggestions to Consider:
- **Edge Cases**: Boundary conditions, error states, unusual user behaviors
- **UI Verification**: Visual consistency, responsive design, accessibility compliance
- **Functional Tests**: Core business logic, integration points, data validation
- **Negative Tests**: Error handling, invalid inputs, system failures
- **Performance Tests**: Load handling, response times, resource usage
- **Security Tests**: Authentication, authorization, data protection
- **Integration Tests**: API interactions, third-party services, data flow

Return exactly one suggestion per response."""


def build_analysis_system_prompt(assumptions: Sequence[str]) -> str:
    if not assumptions:
        return ANALYSIS_SYSTEM_PROMPT
    listed = "\n".join(f"- {assumption}" for assumption in assumptions)
    return f"{ANALYSIS_SYSTEM_PROMPT}\n\n{UNCERTAINTY_INSTRUCTIONS}\n\nSpecific assumptions detected in this request:\n{listed}\n"


def _comment_lines(ticket: JiraTicket) -> str:
    lines = []
    for index, comment in enumerate(ticket.comments, start=1):
        body = comment.body[:COMMENT_PREVIEW_CHARS]
        if len(comment.body) > COMMENT_PREVIEW_CHARS:
            body += "..."
        lines.append(f"{index}. {comment.author} ({comment.date}): {body}")
    return "\n".join(lines) or "None"


def build_analysis_prompt(
    ticket: JiraTicket,
    qa_profile: QAProfile,
    summary: TicketSummary,
    warnings: List[AnalysisWarning],
    complexity: str,
    categories: List[str],
    count: TestCaseCount,
) -> str:
    """User prompt carrying ticket facts, profile settings and the heuristic findings"""
    test_case_format = qa_profile.test_case_format.value
    active = ", ".join(categories) or "None selected"
    custom_fields = "\n".join(f"- {key}: {value}" for key, value in ticket.custom_fields.items()) or "None"
    components = ", ".join(ticket.components) or "None specified"

    if qa_profile.include_comments:
        comments = f"**COMMENTS ({len(ticket.comments)} total):**\n{_comment_lines(ticket)}"
    else:
        comments = "**COMMENTS:** excluded by QA profile"

    findings = "\n".join(f"- [{w.severity.value}] {w.title}: {w.message}" for w in warnings) or "- None detected"
    ideas = "\n".join(
        f"- {entry['category']}: {'; '.join(entry['suggestions'])}"
        for entry in generate_category_test_suggestions(categories)
    ) or "- None"

    return f"""Analyze this Jira ticket and create comprehensive QA documentation:

**TICKET INFORMATION:**
- Issue Key: {ticket.issue_key}
- Summary: {ticket.summary}
- Type: {ticket.issue_type}
- Priority: {ticket.priority}
- Status: {ticket.status}
- Assignee: {ticket.assignee or 'Unassigned'}
- Reporter: {ticket.reporter}

**DESCRIPTION:**
{ticket.description or 'No description provided'}

**COMPONENTS:**
{components}

**CUSTOM FIELDS:**
{custom_fields}

{comments}

**QA PROFILE SETTINGS:**
- Test Case Format: {test_case_format}
- Active Categories: {active}
- Include Comments: {qa_profile.include_comments}
- Include Images: {qa_profile.include_images}

**PRELIMINARY ANALYSIS:**
- Problem: {summary.problem}
- Solution: {summary.solution}
- Context: {summary.context}
- Estimated complexity: {complexity}
- Recommended test cases: {count.recommended} (between {count.min} and {count.max})

**CONFIGURATION FINDINGS:**
{findings}

**CATEGORY TEST IDEAS:**
{ideas}
{generate_format_prompt_guidance(qa_profile.test_case_format, ticket, qa_profile)}
**INSTRUCTIONS:**
1. Create a simplified explanation of what this ticket is about (problem, solution, context)
2. Report conflicts between the ticket requirements and QA profile settings in configurationWarnings
3. Generate detailed acceptance criteria based on the ticket content
4. Create test cases in the specified format ({test_case_format}), each with a unique id
5. Focus on the active QA categories: {active}

Generate a complete QACanvasDocument with all sections properly filled out."""


def build_suggestion_prompt(
    document: QACanvasDocument,
    max_suggestions: int,
    focus_areas: Optional[List[SuggestionType]],
    exclude_types: List[SuggestionType],
    gaps: List[CoverageGap],
    vague: List[VagueCriterion],
) -> str:
    profile = document.metadata.qa_profile
    criteria = "\n".join(
        f"{i}. {c.title} ({c.priority.value}, {c.category.value})"
        for i, c in enumerate(document.acceptance_criteria, start=1)
    )
    test_cases = "\n".join(
        f"{i}. {tc.category} - {tc.priority.value} priority" for i, tc in enumerate(document.test_cases, start=1)
    )
    warnings = "\n".join(f"- {w.title}: {w.message}" for w in document.configuration_warnings)
    gap_lines = "\n".join(
        f"- [{g.severity.value}] ({map_gap_to_suggestion_type(g).value}) {g.description}: {g.suggested_action}"
        for g in gaps
    )
    vague_lines = "\n".join(f"- {v.source}: {v.clarification_question}" for v in vague)

    requirements = []
    if focus_areas:
        requirements.append(f"- Focus on these areas: {', '.join(t.value for t in focus_areas)}")
    else:
        requirements.append("- Consider all relevant QA areas")
    if exclude_types:
        requirements.append(f"- Exclude these types: {', '.join(t.value for t in exclude_types)}")

    return f"""Analyze this QA documentation and generate {max_suggestions} actionable suggestions to improve test coverage and quality.

**DOCUMENT CONTEXT:**
- Ticket ID: {document.metadata.ticket_id}
- Problem: {document.ticket_summary.problem}
- Solution: {document.ticket_summary.solution}
- Context: {document.ticket_summary.context}

**CURRENT ACCEPTANCE CRITERIA ({len(document.acceptance_criteria)} total):**
{criteria or 'None defined'}

**CURRENT TEST CASES ({len(document.test_cases)} total):**
{test_cases or 'None defined'}

**CONFIGURATION WARNINGS:**
{warnings or 'None'}

**QA PROFILE:**
- Test Case Format: {profile.test_case_format.value}
- Active Categories: {', '.join(profile.qa_categories.active()) or 'None selected'}

**DETECTED COVERAGE GAPS:**
{gap_lines or 'None'}

**AMBIGUOUS REQUIREMENTS:**
{vague_lines or 'None'}

**SUGGESTION REQUIREMENTS:**
{chr(10).join(requirements)}

Prioritize based on risk and business impact, and keep each suggestion specific to this ticket."""


def build_context_summary(document: QACanvasDocument) -> str:
    warning_count = len(document.configuration_warnings)
    warnings = f", and {warning_count} configuration warnings" if warning_count else ""
    return (
        f"Analyzed QA documentation for {document.metadata.ticket_id} containing "
        f"{len(document.acceptance_criteria)} acceptance criteria, {len(document.test_cases)} test cases{warnings}."
    )
