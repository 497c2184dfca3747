from enum import Enum
from typing import List

from pydantic import Field, StrictBool

from qa_canvas.models.base import CamelModel


class TestCaseFormat(str, Enum):
    GHERKIN = "gherkin"
    STEPS = "steps"
    TABLE = "table"


class OperationMode(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


# Canonical ordering used wherever categories are listed
CATEGORY_ORDER: List[str] = [
    "functional",
    "ux",
    "ui",
    "negative",
    "api",
    "database",
    "performance",
    "security",
    "mobile",
    "accessibility",
]


class QACategories(CamelModel):
    functional: StrictBool = Field(..., description="Functional testing - core feature behavior")
    ux: StrictBool = Field(..., description="User experience testing - usability and user flows")
    ui: StrictBool = Field(..., description="User interface testing - visual elements and interactions")
    negative: StrictBool = Field(..., description="Negative testing - error handling and edge cases")
    api: StrictBool = Field(..., description="API testing - endpoints, data validation, integration")
    database: StrictBool = Field(..., description="Database testing - data integrity and persistence")
    performance: StrictBool = Field(..., description="Performance testing - load, speed, resource usage")
    security: StrictBool = Field(..., description="Security testing - authentication, authorization, vulnerabilities")
    mobile: StrictBool = Field(..., description="Mobile testing - responsive design and mobile-specific features")
    accessibility: StrictBool = Field(..., description="Accessibility testing - WCAG compliance and inclusive design")

    def active(self) -> List[str]:
        """Enabled category names in canonical order"""
        return [name for name in CATEGORY_ORDER if getattr(self, name)]


class QAProfile(CamelModel):
    """User preferences for QA analysis and test generation"""

    qa_categories: QACategories = Field(..., description="Active QA testing categories")
    test_case_format: TestCaseFormat = Field(..., description="Preferred format for test case generation")

    # Client behavior settings
    auto_refresh: StrictBool = Field(..., description="Whether to auto-refresh ticket data")
    include_comments: StrictBool = Field(..., description="Whether to include ticket comments in analysis")
    include_images: StrictBool = Field(..., description="Whether to include images from comments and attachments")
    operation_mode: OperationMode = Field(..., description="Client operation mode")
    show_notifications: StrictBool = Field(..., description="Whether to show browser notifications")


# Default QA Profile for new users
DEFAULT_QA_PROFILE = QAProfile(
    qa_categories=QACategories(
        functional=True,
        ux=True,
        ui=True,
        negative=True,
        api=False,
        database=False,
        performance=False,
        security=False,
        mobile=True,
        accessibility=True,
    ),
    test_case_format=TestCaseFormat.STEPS,
    auto_refresh=True,
    include_comments=True,
    include_images=True,
    operation_mode=OperationMode.OFFLINE,
    show_notifications=True,
)
