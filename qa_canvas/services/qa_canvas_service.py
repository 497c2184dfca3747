import re
import time
from dataclasses import dataclass
from typing import List, Optional

import structlog

from qa_canvas.analysis import rules
from qa_canvas.analysis.coverage import analyze_coverage_gaps, find_vague_criteria
from qa_canvas.analysis.test_case_formatter import get_recommended_test_case_count
from qa_canvas.analysis.ticket_analyzer import (
    analyze_ticket_content,
    detect_configuration_conflicts,
    estimate_test_complexity,
    generate_test_case_categories,
    ticket_signals,
)
from qa_canvas.config.settings import settings
from qa_canvas.core.errors import GenerationError
from qa_canvas.models.document import (
    ConfigurationWarning,
    DocumentMetadata,
    QACanvasDocument,
    Severity,
    WarningType,
    create_minimal_document,
    utc_now_iso,
)
from qa_canvas.models.payloads import TicketAnalysisPayload
from qa_canvas.models.qa_profile import QAProfile
from qa_canvas.models.suggestion import (
    GenerateSuggestionsRequest,
    QASuggestion,
    QASuggestionsResponse,
    SuggestionDraft,
    create_qa_suggestion,
)
from qa_canvas.models.ticket import JiraTicket
from qa_canvas.repositories.interfaces.ai_service import IAIService
from qa_canvas.services import prompts

logger = structlog.get_logger()

# Descriptions shorter than this are flagged as an assumption in the prompt
MIN_DESCRIPTION_CHARS = 50

PARTIAL_DOCUMENT_VERSION = "1.0-partial"


@dataclass
class AnalysisResult:
    document: QACanvasDocument
    partial: bool = False
    error: Optional[str] = None


def detect_assumptions(ticket: JiraTicket, qa_profile: QAProfile) -> List[str]:
    """Gaps in the input the model has to fill in on its own"""
    assumptions = []
    if len(ticket.description.strip()) < MIN_DESCRIPTION_CHARS:
        assumptions.append("Limited ticket description provided, may affect quality of generated test cases")
    if qa_profile.qa_categories.api and rules.API not in ticket_signals(ticket):
        assumptions.append("API testing category is enabled but ticket may not involve API functionality")
    return assumptions


def count_words(text: str) -> int:
    return len(text.split())


def estimate_word_count(document: QACanvasDocument) -> int:
    """Approximate number of words in the generated content"""
    summary = document.ticket_summary
    texts = [summary.problem, summary.solution, summary.context]
    for warning in document.configuration_warnings:
        texts += [warning.message, warning.recommendation]
    for criterion in document.acceptance_criteria:
        texts += [criterion.title, criterion.description]
    texts += [entry.test_case.text() for entry in document.test_cases]
    return sum(count_words(text) for text in texts)


def merge_warnings(
    generated: List[ConfigurationWarning], detected: List[ConfigurationWarning]
) -> List[ConfigurationWarning]:
    """Model warnings first, then detected warnings whose title is not already present"""
    titles = {warning.title for warning in generated}
    return list(generated) + [warning for warning in detected if warning.title not in titles]


class QACanvasService:
    """Orchestrates ticket analysis, prompt assembly and model generation"""

    def __init__(self, ai_service: IAIService):
        self.ai_service = ai_service

    async def analyze_ticket(self, payload: TicketAnalysisPayload) -> AnalysisResult:
        """Generate a QA canvas document for a ticket.

        A ``GenerationError`` from the model degrades to a partial document
        built from the heuristic analysis; any other error propagates.
        """
        ticket = payload.ticket_json
        qa_profile = payload.qa_profile

        assumptions = detect_assumptions(ticket, qa_profile)
        summary = analyze_ticket_content(ticket)
        warnings = detect_configuration_conflicts(ticket, qa_profile)
        detected = [warning.to_document_warning() for warning in warnings]
        complexity = estimate_test_complexity(ticket)
        categories = generate_test_case_categories(qa_profile)
        count = get_recommended_test_case_count(qa_profile.test_case_format, complexity)

        logger.info(
            "Generating QA canvas document",
            ticket_id=ticket.issue_key,
            test_case_format=qa_profile.test_case_format.value,
            complexity=complexity.value,
            warnings=len(warnings),
            assumptions=len(assumptions),
        )

        start = time.perf_counter()
        try:
            generated = await self.ai_service.generate_object(
                QACanvasDocument,
                prompts.build_analysis_prompt(ticket, qa_profile, summary, warnings, complexity.value, categories, count),
                system=prompts.build_analysis_system_prompt(assumptions),
                temperature=settings.generation_temperature,
                max_tokens=settings.generation_max_tokens,
            )
        except GenerationError as e:
            generation_time = _elapsed_ms(start)
            logger.error(
                "Document generation failed, returning partial result",
                ticket_id=ticket.issue_key,
                error=str(e),
                generation_time=generation_time,
            )
            return AnalysisResult(
                document=self._partial_document(ticket, qa_profile, summary, detected, e, generation_time),
                partial=True,
                error=str(e),
            )

        generation_time = _elapsed_ms(start)
        document = generated.model_copy(
            update={"configuration_warnings": merge_warnings(generated.configuration_warnings, detected)}
        )
        document = document.model_copy(
            update={
                "metadata": DocumentMetadata(
                    generated_at=utc_now_iso(),
                    qa_profile=qa_profile,
                    ticket_id=ticket.issue_key,
                    document_version="1.0",
                    ai_model=self.ai_service.model_name,
                    generation_time=generation_time,
                    word_count=estimate_word_count(document),
                    regeneration_reason=(
                        f"Generated with {len(assumptions)} assumptions" if assumptions else None
                    ),
                )
            }
        )

        logger.info(
            "QA canvas document generated",
            ticket_id=ticket.issue_key,
            generation_time=generation_time,
            acceptance_criteria=len(document.acceptance_criteria),
            test_cases=len(document.test_cases),
        )
        return AnalysisResult(document=document)

    def _partial_document(
        self,
        ticket: JiraTicket,
        qa_profile: QAProfile,
        summary,
        detected: List[ConfigurationWarning],
        error: GenerationError,
        generation_time: float,
    ) -> QACanvasDocument:
        minimal = create_minimal_document(ticket.issue_key, qa_profile)
        error_warning = ConfigurationWarning(
            type=WarningType.RECOMMENDATION,
            title="Document Generation Error",
            message=f"Failed to generate complete document: {error}",
            recommendation="Try again with more detailed ticket information or different QA profile settings",
            severity=Severity.HIGH,
        )
        return minimal.model_copy(
            update={
                "ticket_summary": summary,
                "configuration_warnings": [*detected, error_warning],
                "metadata": minimal.metadata.model_copy(
                    update={
                        "document_version": PARTIAL_DOCUMENT_VERSION,
                        "ai_model": self.ai_service.model_name,
                        "generation_time": generation_time,
                        "regeneration_reason": "Partial result: acceptance criteria and test cases could not be generated",
                    }
                ),
            }
        )

    async def generate_suggestions(self, request: GenerateSuggestionsRequest) -> QASuggestionsResponse:
        """Request ``max_suggestions`` suggestions, one model call each.

        Failed or excluded suggestions are skipped; if none survive a
        ``GenerationError`` is raised.
        """
        document = request.current_document
        gaps = analyze_coverage_gaps(document)
        vague = find_vague_criteria(document)
        base_prompt = prompts.build_suggestion_prompt(
            document, request.max_suggestions, request.focus_areas, request.exclude_types, gaps, vague
        )

        logger.info(
            "Generating QA suggestions",
            ticket_id=document.metadata.ticket_id,
            max_suggestions=request.max_suggestions,
            coverage_gaps=len(gaps),
            request_id=request.request_id,
        )

        suggestions: List[QASuggestion] = []
        for index in range(request.max_suggestions):
            prompt = f"{base_prompt}\n\nGenerate suggestion {index + 1} of {request.max_suggestions}."
            if suggestions:
                previous = "; ".join(s.title for s in suggestions)
                prompt += f" Make it different from the previous suggestions: {previous}"
            try:
                draft = await self.ai_service.generate_object(
                    SuggestionDraft,
                    prompt,
                    system=prompts.SUGGESTION_SYSTEM_PROMPT,
                    temperature=settings.suggestion_temperature,
                    max_tokens=settings.suggestion_max_tokens,
                )
            except GenerationError as e:
                logger.warning("Failed to generate suggestion", index=index + 1, error=str(e))
                continue

            if draft.suggestion_type in request.exclude_types:
                logger.info("Skipping excluded suggestion type", suggestion_type=draft.suggestion_type.value)
                continue

            suggestions.append(create_qa_suggestion(draft, _related_requirements(document, draft)))

        if not suggestions:
            raise GenerationError(
                "Failed to generate any suggestions",
                provider=self.ai_service.provider,
                model=self.ai_service.model_name,
            )

        return QASuggestionsResponse(
            suggestions=suggestions,
            total_count=len(suggestions),
            generated_at=utc_now_iso(),
            context_summary=prompts.build_context_summary(document),
        )


def _related_requirements(document: QACanvasDocument, draft: SuggestionDraft) -> List[str]:
    text = f"{draft.description} {draft.reasoning} {draft.implementation_hint or ''}"
    return [
        criterion.id
        for criterion in document.acceptance_criteria
        if re.search(rf"(?<![\w-]){re.escape(criterion.id)}(?![\w-])", text)
    ]


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
