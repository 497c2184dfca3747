import copy

import pytest

from conftest import BUG_TICKET, PROFILE, make_profile
from qa_canvas.models import document as doc
from qa_canvas.models.validation import (
    format_error_path,
    validate_analyze_ticket_request,
    validate_qa_canvas_document,
    validate_ticket_analysis_payload,
)

GHERKIN_BODY = {
    "scenario": "User logs in successfully",
    "given": ["User is on login page"],
    "when": ["User enters credentials"],
    "then": ["User is redirected to dashboard"],
    "tags": ["@authentication"],
}

TABLE_BODY = {
    "title": "Registration input combinations",
    "description": "Form validation for each field",
    "testData": [{"username": "", "expected": "Username is required"}],
    "expectedOutcome": "Every invalid combination is rejected",
}


def test_valid_document(document_data):
    result = validate_qa_canvas_document(document_data)

    assert result.success
    assert isinstance(result.data, doc.QACanvasDocument)
    assert result.data.test_cases[0].test_case.steps[0].expected_result == "The form is submitted"


def test_empty_arrays_are_accepted(document_data):
    document_data["acceptanceCriteria"] = []
    document_data["testCases"] = []
    del document_data["configurationWarnings"]

    result = validate_qa_canvas_document(document_data)

    assert result.success
    assert result.data.configuration_warnings == []


@pytest.mark.parametrize("field", ["acceptanceCriteria", "testCases"])
def test_missing_arrays_are_rejected(document_data, field):
    del document_data[field]

    result = validate_qa_canvas_document(document_data)

    assert not result.success
    assert field in [error.path for error in result.errors]


def test_all_three_formats(document_data):
    document_data["testCases"] += [
        {"format": "gherkin", "id": "tc-2", "category": "functional", "testCase": GHERKIN_BODY},
        {"format": "table", "id": "tc-3", "category": "negative", "testCase": TABLE_BODY},
    ]

    result = validate_qa_canvas_document(document_data)

    assert result.success
    entries = result.data.test_cases
    assert isinstance(entries[1], doc.GherkinTestCaseEntry)
    assert isinstance(entries[2], doc.TableTestCaseEntry)
    assert entries[1].priority == doc.TestCasePriority.MEDIUM


def test_format_body_mismatch_is_rejected(document_data):
    document_data["testCases"][0]["format"] = "gherkin"

    result = validate_qa_canvas_document(document_data)

    assert not result.success
    assert any(error.path.startswith("testCases.0.gherkin.testCase") for error in result.errors)


def test_gherkin_body_under_table_tag_is_rejected(document_data):
    document_data["testCases"] = [{"format": "table", "id": "tc-1", "category": "functional", "testCase": GHERKIN_BODY}]

    assert not validate_qa_canvas_document(document_data).success


def test_unknown_format_is_rejected(document_data):
    document_data["testCases"][0]["format"] = "checklist"

    result = validate_qa_canvas_document(document_data)

    assert not result.success
    assert result.errors[0].path == "testCases.0"


@pytest.mark.parametrize(
    "path, value",
    [
        (("configurationWarnings",), [{"type": "oops", "title": "t", "message": "m", "recommendation": "r"}]),
        (("acceptanceCriteria", 0, "priority"), "critical"),
        (("acceptanceCriteria", 0, "category"), "negative"),
        (("testCases", 0, "priority"), "urgent"),
    ],
)
def test_out_of_set_enum_values_are_rejected(document_data, path, value):
    target = document_data
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value

    assert not validate_qa_canvas_document(document_data).success


def test_duplicate_criterion_ids_are_rejected(document_data):
    document_data["acceptanceCriteria"][1]["id"] = "ac-1"

    result = validate_qa_canvas_document(document_data)

    assert not result.success
    assert result.errors[0].path == "acceptanceCriteria"
    assert "ac-1" in result.errors[0].message


def test_duplicate_test_case_ids_are_rejected(document_data):
    document_data["testCases"].append(copy.deepcopy(document_data["testCases"][0]))

    assert not validate_qa_canvas_document(document_data).success


def test_empty_summary_field_is_rejected(document_data):
    document_data["ticketSummary"]["problem"] = ""

    result = validate_qa_canvas_document(document_data)

    assert not result.success
    assert result.errors[0].path == "ticketSummary.problem"


@pytest.mark.parametrize("value", [None, 42, "document", []])
def test_non_object_input_never_raises(value):
    result = validate_qa_canvas_document(value)

    assert not result.success
    assert result.errors


def test_minimal_document_validates():
    minimal = doc.create_minimal_document("BUG-123", make_profile())

    result = validate_qa_canvas_document(minimal.to_wire())

    assert result.success
    assert minimal.acceptance_criteria == []
    assert minimal.test_cases == []
    assert minimal.metadata.ticket_id == "BUG-123"
    assert minimal.metadata.document_version == "1.0"
    assert "BUG-123" in minimal.ticket_summary.problem


def test_wire_output_uses_camel_case(document_data):
    wire = validate_qa_canvas_document(document_data).data.to_wire()

    assert set(wire) == {"ticketSummary", "configurationWarnings", "acceptanceCriteria", "testCases", "metadata"}
    assert wire["testCases"][0]["testCase"]["steps"][0]["stepNumber"] == 1


def test_document_is_frozen(document_data):
    document = validate_qa_canvas_document(document_data).data

    with pytest.raises(Exception):
        document.ticket_summary = None


def test_ticket_analysis_payload():
    result = validate_ticket_analysis_payload({"qaProfile": PROFILE, "ticketJson": BUG_TICKET})

    assert result.success
    assert result.data.ticket_json.issue_key == "BUG-123"
    assert result.data.ticket_json.comments[0].images == []


def test_ticket_analysis_payload_reports_nested_paths():
    ticket = copy.deepcopy(BUG_TICKET)
    del ticket["issueKey"]

    result = validate_ticket_analysis_payload({"qaProfile": PROFILE, "ticketJson": ticket})

    assert not result.success
    assert [error.path for error in result.errors] == ["ticketJson.issueKey"]
    assert result.errors[0].code == "missing"


def test_analyze_ticket_request_optional_fields():
    result = validate_analyze_ticket_request(
        {"qaProfile": PROFILE, "ticketJson": BUG_TICKET, "requestId": "req-1", "clientVersion": "1.2.0"}
    )

    assert result.success
    assert result.data.request_id == "req-1"
    assert result.data.user_agent is None


def test_format_error_path():
    assert format_error_path(("testCases", 0, "gherkin", "testCase", "scenario")) == "testCases.0.gherkin.testCase.scenario"
    assert format_error_path(()) == "(root)"
