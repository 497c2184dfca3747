from typing import Any, Dict, List, Optional

from pydantic import Field

from qa_canvas.models.base import CamelModel


class CommentImage(CamelModel):
    alt: str = Field(..., description="Alt text for the image")
    filename: str = Field(..., description="Image filename")
    height: float = Field(..., description="Image height in pixels")
    is_attachment: bool = Field(..., description="Whether this image is an attachment")
    mime_type: str = Field(..., description="MIME type of the image")
    src: str = Field(..., description="Image source URL")
    title: str = Field(..., description="Image title")
    width: float = Field(..., description="Image width in pixels")


class JiraComment(CamelModel):
    author: str = Field(..., description="Comment author name")
    body: str = Field(..., description="Comment content")
    date: str = Field(..., description="Comment creation date string")
    images: List[CommentImage] = Field(default_factory=list, description="Images embedded in the comment")
    links: List[str] = Field(default_factory=list, description="Links mentioned in the comment")


class JiraAttachment(CamelModel):
    data: str = Field(..., description="Base64 encoded attachment data")
    mime: str = Field(..., description="MIME type of the attachment")
    name: str = Field(..., description="Attachment filename")
    size: int = Field(..., description="File size in bytes")
    too_big: bool = Field(..., description="Whether the attachment is too big to process")
    url: str = Field(..., description="Blob URL for the attachment")


class JiraTicket(CamelModel):
    """Normalized ticket as scraped from the Jira page by the client"""

    issue_key: str = Field(..., description='Jira ticket key (e.g., "EN-8775")')
    summary: str = Field(..., description="Ticket title/summary")
    description: str = Field(..., description="Ticket description content")

    status: str = Field(..., description='Current ticket status (e.g., "Done")')
    priority: str = Field(..., description='Ticket priority (e.g., "Priority: Normal")')
    issue_type: str = Field(..., description='Type of issue (e.g., "Bug")')

    assignee: Optional[str] = Field(None, description="Assigned user name")
    reporter: str = Field(..., description="User who created the ticket")

    comments: List[JiraComment] = Field(default_factory=list, description="Ticket comments in order")
    attachments: List[JiraAttachment] = Field(default_factory=list, description="Ticket attachments")

    components: List[str] = Field(default_factory=list, description='Jira components (e.g., ["Accounts Receivable"])')
    custom_fields: Dict[str, Any] = Field(..., description="Custom fields from Jira")
    processing_complete: Optional[bool] = Field(None, description="Whether scraping finished")

    scraped_at: str = Field(..., description="Timestamp when data was scraped")

    @property
    def content(self) -> str:
        """Summary and description joined for keyword scanning"""
        return f"{self.summary} {self.description}"
