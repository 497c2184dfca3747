from typing import Optional

from pydantic import Field

from qa_canvas.models.base import CamelModel
from qa_canvas.models.qa_profile import QAProfile
from qa_canvas.models.ticket import JiraTicket


class TicketAnalysisPayload(CamelModel):
    """Payload sent to the analyze-ticket endpoint"""

    qa_profile: QAProfile = Field(..., description="User QA preferences and configuration")
    ticket_json: JiraTicket = Field(..., description="Complete Jira ticket data scraped from the page")


class AnalyzeTicketRequest(TicketAnalysisPayload):
    request_id: Optional[str] = Field(None, description="Optional request ID for tracking")
    client_version: Optional[str] = Field(None, description="Client extension version")
    user_agent: Optional[str] = Field(None, description="Browser user agent string")
