import copy
from typing import Any, Dict, List, Optional, Type

import pytest
from fastapi.testclient import TestClient

from main import app
from qa_canvas.core.dependencies import get_ai_service
from qa_canvas.core.errors import SchemaValidationError
from qa_canvas.models import qa_profile as profiles
from qa_canvas.models.ticket import JiraTicket
from qa_canvas.repositories.interfaces.ai_service import IAIService

SCRAPED_AT = "2024-01-15T13:00:00Z"

BUG_TICKET = {
    "issueKey": "BUG-123",
    "summary": "Login button not working on mobile devices",
    "description": "Users are unable to click the login button on mobile devices. The button appears to be unresponsive to touch events.",
    "status": "Open",
    "priority": "Priority: High",
    "issueType": "Bug",
    "assignee": "John Doe",
    "reporter": "Jane Smith",
    "comments": [
        {
            "author": "Developer",
            "date": "2024-01-15",
            "body": "This appears to be a CSS issue with touch event handling. Need to fix the button styles.",
        }
    ],
    "attachments": [],
    "components": ["Frontend", "Mobile"],
    "customFields": {"Environment": "Production", "Browser": "Safari Mobile"},
    "processingComplete": True,
    "scrapedAt": SCRAPED_AT,
}

FEATURE_TICKET = {
    "issueKey": "FEAT-456",
    "summary": "Implement user profile API endpoint",
    "description": "Create a new REST API endpoint that allows users to retrieve and update their profile information. The endpoint should support authentication and return user data in JSON format.",
    "status": "In Progress",
    "priority": "Priority: Medium",
    "issueType": "Story",
    "assignee": "API Developer",
    "reporter": "Product Manager",
    "comments": [],
    "attachments": [],
    "components": ["Backend", "API"],
    "customFields": {"Story Points": "5", "Epic": "User Management"},
    "processingComplete": True,
    "scrapedAt": SCRAPED_AT,
}

SECURITY_TICKET = {
    "issueKey": "SEC-789",
    "summary": "Add OAuth2 authentication to admin panel",
    "description": "Implement OAuth2 authentication for the admin panel to improve security. Users should be able to login using their corporate credentials.",
    "status": "To Do",
    "priority": "Priority: High",
    "issueType": "Security",
    "assignee": "Security Engineer",
    "reporter": "Security Team",
    "comments": [],
    "attachments": [],
    "components": ["Admin Panel", "Authentication"],
    "customFields": {"Security Level": "High", "Compliance": "SOC2"},
    "processingComplete": True,
    "scrapedAt": SCRAPED_AT,
}

PROFILE = {
    "qaCategories": {
        "functional": True,
        "ux": True,
        "ui": True,
        "negative": True,
        "api": False,
        "database": False,
        "performance": False,
        "security": False,
        "mobile": True,
        "accessibility": True,
    },
    "testCaseFormat": "steps",
    "autoRefresh": True,
    "includeComments": True,
    "includeImages": True,
    "operationMode": "offline",
    "showNotifications": True,
}

DOCUMENT = {
    "ticketSummary": {
        "problem": "Users cannot tap the login button on mobile devices",
        "solution": "Fix the touch handling in the button styles",
        "context": "Login flow on the mobile web frontend",
    },
    "configurationWarnings": [],
    "acceptanceCriteria": [
        {
            "id": "ac-1",
            "title": "Login button responds to touch",
            "description": "Tapping the login button submits the form on iOS and Android",
            "priority": "must",
            "category": "functional",
            "testable": True,
        },
        {
            "id": "ac-2",
            "title": "Pressed state visible",
            "description": "The button shows an appropriate pressed state",
            "priority": "should",
            "category": "ui",
            "testable": True,
        },
    ],
    "testCases": [
        {
            "format": "steps",
            "id": "tc-1",
            "category": "functional",
            "priority": "high",
            "testCase": {
                "title": "Login button responds to touch on mobile",
                "objective": "Verify the login button submits on tap",
                "preconditions": ["User is on the login page on a phone"],
                "steps": [
                    {
                        "stepNumber": 1,
                        "action": "Tap the login button",
                        "expectedResult": "The form is submitted",
                    }
                ],
                "postconditions": [],
            },
        }
    ],
    "metadata": {
        "generatedAt": "2024-01-15T13:05:00Z",
        "qaProfile": PROFILE,
        "ticketId": "BUG-123",
        "documentVersion": "1.0",
    },
}


def make_ticket(base: Dict[str, Any], **overrides) -> JiraTicket:
    data = copy.deepcopy(base)
    data.update(overrides)
    return JiraTicket.model_validate(data)


def make_profile(test_case_format: Optional[str] = None, **categories: bool) -> profiles.QAProfile:
    data = copy.deepcopy(PROFILE)
    data["qaCategories"].update(categories)
    if test_case_format:
        data["testCaseFormat"] = test_case_format
    return profiles.QAProfile.model_validate(data)


class FakeAIService(IAIService):
    """Returns queued results per schema; the last queued result repeats"""

    provider = "fake"

    def __init__(self):
        self.results: Dict[type, List[Any]] = {}
        self.calls: List[Dict[str, Any]] = []

    @property
    def model_name(self) -> str:
        return "fake-model"

    def is_configured(self) -> bool:
        return True

    def queue(self, schema: Type, *results: Any) -> None:
        self.results.setdefault(schema, []).extend(results)

    async def generate_object(self, schema, prompt, *, system=None, temperature=0.3, max_tokens=4000):
        self.calls.append(
            {"schema": schema, "prompt": prompt, "system": system, "temperature": temperature, "max_tokens": max_tokens}
        )
        queued = self.results.get(schema)
        if not queued:
            raise SchemaValidationError(f"Failed to generate {schema.__name__}: nothing queued", provider="fake")
        result = queued.pop(0) if len(queued) > 1 else queued[0]
        if isinstance(result, Exception):
            raise result
        return schema.model_validate(result)


@pytest.fixture
def bug_ticket():
    return make_ticket(BUG_TICKET)


@pytest.fixture
def feature_ticket():
    return make_ticket(FEATURE_TICKET)


@pytest.fixture
def security_ticket():
    return make_ticket(SECURITY_TICKET)


@pytest.fixture
def profile_data():
    return copy.deepcopy(PROFILE)


@pytest.fixture
def document_data():
    return copy.deepcopy(DOCUMENT)


@pytest.fixture
def fake_ai():
    return FakeAIService()


@pytest.fixture
def test_client(fake_ai):
    """Synchronous test client with the model provider replaced by a fake"""
    app.dependency_overrides[get_ai_service] = lambda: fake_ai
    yield TestClient(app)
    app.dependency_overrides.clear()
