import pytest

from qa_canvas.analysis.coverage import (
    CoverageGap,
    analyze_coverage_gaps,
    find_vague_criteria,
    keywords,
    map_gap_to_suggestion_type,
    vague_terms,
)
from qa_canvas.models.document import QACanvasDocument, Severity
from qa_canvas.models.suggestion import SuggestionType


@pytest.fixture
def document(document_data):
    return QACanvasDocument.model_validate(document_data)


def test_untested_criterion_is_reported(document):
    gaps = analyze_coverage_gaps(document)

    criterion_gaps = [gap for gap in gaps if gap.description.startswith("Missing test coverage")]
    assert [gap.description for gap in criterion_gaps] == [
        "Missing test coverage for acceptance criterion: Pressed state visible"
    ]
    assert criterion_gaps[0].severity == Severity.MEDIUM
    assert criterion_gaps[0].category == "ui"
    assert "steps test case" in criterion_gaps[0].suggested_action


def test_untested_must_criterion_is_high(document_data):
    document_data["acceptanceCriteria"][0]["title"] = "Session expires after inactivity"

    gaps = analyze_coverage_gaps(QACanvasDocument.model_validate(document_data))

    gap = next(gap for gap in gaps if "Session expires" in gap.description)
    assert gap.severity == Severity.HIGH


def test_active_categories_without_tests(document):
    gaps = analyze_coverage_gaps(document)

    missing = [gap.category for gap in gaps if gap.description.startswith("No test cases for active category")]
    assert missing == ["ux", "ui", "negative", "mobile", "accessibility"]


def test_missing_negative_and_edge_coverage(document):
    gaps = analyze_coverage_gaps(document)

    negative = next(gap for gap in gaps if gap.description == "Missing negative test scenarios")
    assert negative.category == "negative"
    assert negative.severity == Severity.HIGH
    assert gaps[-1].category == "edge_case"
    assert gaps[-1].description == "Limited edge case coverage"


def test_negative_gherkin_scenario_counts_as_negative_coverage(document_data):
    document_data["testCases"].append(
        {
            "format": "gherkin",
            "id": "tc-2",
            "category": "functional",
            "testCase": {
                "scenario": "Login with wrong password",
                "given": ["User is on the login page"],
                "when": ["User enters an invalid password"],
                "then": ["An error message is shown"],
            },
        }
    )

    gaps = analyze_coverage_gaps(QACanvasDocument.model_validate(document_data))

    assert "Missing negative test scenarios" not in [gap.description for gap in gaps]


def test_edge_case_wording_clears_edge_gap(document_data):
    document_data["testCases"][0]["testCase"]["objective"] = "Verify the maximum tap rate is handled"

    gaps = analyze_coverage_gaps(QACanvasDocument.model_validate(document_data))

    assert "edge_case" not in [gap.category for gap in gaps]


def test_vague_criteria(document):
    vague = find_vague_criteria(document)

    assert len(vague) == 1
    assert vague[0].criterion_id == "ac-2"
    assert vague[0].terms == ["appropriate"]
    assert '"appropriate"' in vague[0].clarification_question
    assert "Pressed state visible" in vague[0].clarification_question


def test_vague_terms_match_whole_words():
    assert vague_terms("Handle something quickly") == []
    assert vague_terms("Show a few options, etc.") == ["etc", "few"]


def test_keywords_drop_stop_words_and_short_words():
    assert keywords("Login button responds to the touch!") == ["login", "button", "responds", "touch"]


@pytest.mark.parametrize(
    "category, expected",
    [
        ("edge_case", SuggestionType.EDGE_CASE),
        ("ui", SuggestionType.UI_VERIFICATION),
        ("ux", SuggestionType.UI_VERIFICATION),
        ("negative", SuggestionType.NEGATIVE_TEST),
        ("security", SuggestionType.SECURITY_TEST),
        ("performance", SuggestionType.PERFORMANCE_TEST),
        ("accessibility", SuggestionType.ACCESSIBILITY_TEST),
        ("api", SuggestionType.INTEGRATION_TEST),
        ("database", SuggestionType.DATA_VALIDATION),
        ("functional", SuggestionType.FUNCTIONAL_TEST),
        ("mobile", SuggestionType.FUNCTIONAL_TEST),
    ],
)
def test_gap_to_suggestion_type(category, expected):
    gap = CoverageGap(category=category, description="", severity=Severity.LOW, suggested_action="")

    assert map_gap_to_suggestion_type(gap) == expected
