import copy

import pytest

from conftest import BUG_TICKET, DOCUMENT, PROFILE
from qa_canvas.config.settings import settings
from qa_canvas.core.errors import GenerationError, ProviderError, SchemaValidationError
from qa_canvas.models.document import QACanvasDocument, Severity, WarningType
from qa_canvas.models.payloads import TicketAnalysisPayload
from qa_canvas.models.suggestion import GenerateSuggestionsRequest, SuggestionDraft
from qa_canvas.services import qa_canvas_service as service_module
from qa_canvas.services.qa_canvas_service import QACanvasService


def _payload(**ticket_overrides):
    ticket = copy.deepcopy(BUG_TICKET)
    ticket.update(ticket_overrides)
    return TicketAnalysisPayload.model_validate({"qaProfile": PROFILE, "ticketJson": ticket})


def _suggestions_request(**overrides):
    data = {"currentDocument": DOCUMENT, "maxSuggestions": 3}
    data.update(overrides)
    return GenerateSuggestionsRequest.model_validate(data)


def _draft(title, suggestion_type="edge_case", description="Double tap the button"):
    return {
        "suggestionType": suggestion_type,
        "title": title,
        "description": description,
        "reasoning": "Touch handlers often fire twice",
    }


@pytest.fixture
def service(fake_ai):
    return QACanvasService(fake_ai)


@pytest.mark.asyncio
async def test_analyze_ticket_enriches_metadata(service, fake_ai):
    fake_ai.queue(QACanvasDocument, DOCUMENT)

    result = await service.analyze_ticket(_payload())

    assert result.partial is False
    metadata = result.document.metadata
    assert metadata.ai_model == "fake-model"
    assert metadata.ticket_id == "BUG-123"
    assert metadata.document_version == "1.0"
    assert metadata.generation_time >= 0
    assert metadata.word_count > 0
    assert metadata.regeneration_reason is None
    assert metadata.qa_profile.qa_categories.mobile is True
    assert len(result.document.test_cases) == 1


@pytest.mark.asyncio
async def test_analyze_ticket_passes_prompt_and_settings(service, fake_ai):
    fake_ai.queue(QACanvasDocument, DOCUMENT)

    await service.analyze_ticket(_payload())

    call = fake_ai.calls[0]
    assert call["schema"] is QACanvasDocument
    assert "Issue Key: BUG-123" in call["prompt"]
    assert "TEST CASE FORMAT: STEPS" in call["prompt"]
    assert "Uncertainty Handling" not in call["system"]
    assert call["temperature"] == settings.generation_temperature
    assert call["max_tokens"] == settings.generation_max_tokens


@pytest.mark.asyncio
async def test_detected_warnings_are_merged_after_generated(service, fake_ai):
    document = copy.deepcopy(DOCUMENT)
    document["configurationWarnings"] = [
        {
            "type": "recommendation",
            "title": "Clarify supported devices",
            "message": "The ticket does not list devices",
            "recommendation": "Ask for a device matrix",
        },
        {
            "type": "category_mismatch",
            "title": "Security Testing Recommended",
            "message": "Login flows touch credentials",
            "recommendation": "Enable security testing",
            "severity": "high",
        },
    ]
    fake_ai.queue(QACanvasDocument, document)

    result = await service.analyze_ticket(_payload())

    titles = [w.title for w in result.document.configuration_warnings]
    assert titles == ["Clarify supported devices", "Security Testing Recommended"]
    assert result.document.configuration_warnings[1].message == "Login flows touch credentials"


@pytest.mark.asyncio
async def test_detected_warnings_added_when_model_reports_none(service, fake_ai):
    fake_ai.queue(QACanvasDocument, DOCUMENT)

    result = await service.analyze_ticket(_payload())

    warnings = result.document.configuration_warnings
    assert [w.title for w in warnings] == ["Security Testing Recommended"]
    assert warnings[0].type == WarningType.CATEGORY_MISMATCH


@pytest.mark.asyncio
async def test_short_description_is_flagged_as_assumption(service, fake_ai):
    fake_ai.queue(QACanvasDocument, DOCUMENT)

    result = await service.analyze_ticket(_payload(description="Button broken."))

    assert result.document.metadata.regeneration_reason == "Generated with 1 assumptions"
    assert "Limited ticket description provided" in fake_ai.calls[0]["system"]


@pytest.mark.asyncio
async def test_generation_failure_returns_partial_document(service, fake_ai):
    fake_ai.queue(QACanvasDocument, SchemaValidationError("Failed to generate QACanvasDocument: not json"))

    result = await service.analyze_ticket(_payload())

    assert result.partial is True
    assert "not json" in result.error
    document = result.document
    assert document.metadata.document_version == service_module.PARTIAL_DOCUMENT_VERSION
    assert document.acceptance_criteria == []
    assert document.test_cases == []
    assert "Login button not working" in document.ticket_summary.problem
    error_warning = document.configuration_warnings[-1]
    assert error_warning.title == "Document Generation Error"
    assert error_warning.severity == Severity.HIGH
    assert [w.title for w in document.configuration_warnings[:-1]] == ["Security Testing Recommended"]


@pytest.mark.asyncio
async def test_provider_failure_returns_partial_document(service, fake_ai):
    fake_ai.queue(QACanvasDocument, ProviderError("OpenAI request failed: connection reset"))

    result = await service.analyze_ticket(_payload())

    assert result.partial is True


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(service, fake_ai):
    fake_ai.queue(QACanvasDocument, RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await service.analyze_ticket(_payload())


@pytest.mark.asyncio
async def test_generate_suggestions(service, fake_ai):
    fake_ai.queue(
        SuggestionDraft,
        _draft("Double tap", description="Covers ac-1 when the user taps twice"),
        _draft("Pressed state contrast", suggestion_type="ui_verification"),
        _draft("Offline login", suggestion_type="negative_test"),
    )

    response = await service.generate_suggestions(_suggestions_request())

    assert response.total_count == 3
    assert [s.title for s in response.suggestions] == ["Double tap", "Pressed state contrast", "Offline login"]
    assert response.suggestions[0].related_requirements == ["ac-1"]
    assert response.suggestions[1].related_requirements == []
    assert all(s.id.startswith("suggestion-") for s in response.suggestions)
    assert response.context_summary == (
        "Analyzed QA documentation for BUG-123 containing 2 acceptance criteria, 1 test cases."
    )


@pytest.mark.asyncio
async def test_suggestion_prompts_include_gaps_and_previous_titles(service, fake_ai):
    fake_ai.queue(SuggestionDraft, _draft("First idea"), _draft("Second idea"))

    await service.generate_suggestions(_suggestions_request(maxSuggestions=2))

    first, second = (call["prompt"] for call in fake_ai.calls)
    assert "Limited edge case coverage" in first
    assert '"appropriate"' in first
    assert "Generate suggestion 1 of 2." in first
    assert "First idea" in second
    assert fake_ai.calls[0]["temperature"] == settings.suggestion_temperature


@pytest.mark.asyncio
async def test_failed_suggestions_are_skipped(service, fake_ai):
    fake_ai.queue(
        SuggestionDraft,
        _draft("Double tap"),
        SchemaValidationError("Failed to generate SuggestionDraft: truncated"),
        _draft("Long press"),
    )

    response = await service.generate_suggestions(_suggestions_request())

    assert response.total_count == 2
    assert [s.title for s in response.suggestions] == ["Double tap", "Long press"]


@pytest.mark.asyncio
async def test_excluded_types_are_dropped(service, fake_ai):
    fake_ai.queue(
        SuggestionDraft,
        _draft("Clarify pressed state", suggestion_type="clarification_question"),
        _draft("Double tap"),
    )

    response = await service.generate_suggestions(
        _suggestions_request(maxSuggestions=2, excludeTypes=["clarification_question"])
    )

    assert [s.title for s in response.suggestions] == ["Double tap"]


@pytest.mark.asyncio
async def test_no_surviving_suggestions_raises(service, fake_ai):
    fake_ai.queue(SuggestionDraft, SchemaValidationError("Failed to generate SuggestionDraft: empty"))

    with pytest.raises(GenerationError, match="Failed to generate any suggestions"):
        await service.generate_suggestions(_suggestions_request())


def test_word_count_covers_every_test_case_format():
    document = copy.deepcopy(DOCUMENT)

    assert service_module.estimate_word_count(QACanvasDocument.model_validate(document)) == 81

    document["testCases"].append(
        {
            "format": "gherkin",
            "id": "tc-2",
            "category": "functional",
            "testCase": {
                "scenario": "Double tap",
                "given": ["User on login page"],
                "when": ["User double taps"],
                "then": ["Form submits once"],
                "tags": ["@mobile"],
            },
        }
    )

    assert service_module.estimate_word_count(QACanvasDocument.model_validate(document)) == 93


@pytest.mark.asyncio
async def test_analysis_prompt_lists_test_ideas_for_active_categories(service, fake_ai):
    fake_ai.queue(QACanvasDocument, DOCUMENT)

    await service.analyze_ticket(_payload())

    prompt = fake_ai.calls[0]["prompt"]
    assert "**CATEGORY TEST IDEAS:**" in prompt
    assert "- functional: Test core functionality works as specified; " in prompt
    assert "- mobile: Test touch interactions and gestures; " in prompt
    assert "- security:" not in prompt


@pytest.mark.asyncio
async def test_suggestion_prompt_tags_gaps_with_suggestion_types(service, fake_ai):
    fake_ai.queue(SuggestionDraft, _draft("First idea"))

    await service.generate_suggestions(_suggestions_request(maxSuggestions=1))

    prompt = fake_ai.calls[0]["prompt"]
    assert "(ui_verification) Missing test coverage for acceptance criterion: Pressed state visible" in prompt
    assert "(negative_test) Missing negative test scenarios" in prompt
    assert "(edge_case) Limited edge case coverage" in prompt
