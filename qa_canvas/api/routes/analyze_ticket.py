from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
import structlog

from qa_canvas.core.dependencies import get_qa_canvas_service
from qa_canvas.core.errors import classify_ai_error
from qa_canvas.models.payloads import AnalyzeTicketRequest
from qa_canvas.services.qa_canvas_service import QACanvasService

logger = structlog.get_logger()

router = APIRouter(tags=["analysis"])


@router.post("/analyze-ticket")
async def analyze_ticket(
    request: AnalyzeTicketRequest,
    service: QACanvasService = Depends(get_qa_canvas_service)
):
    """Generate a QA canvas document for a Jira ticket.

    Returns 206 with an ``X-Partial-Result`` header when the model failed and
    only the heuristic analysis could be returned.
    """
    logger.info(
        "Analyzing ticket",
        ticket_id=request.ticket_json.issue_key,
        request_id=request.request_id,
        client_version=request.client_version,
    )
    try:
        result = await service.analyze_ticket(request)
    except Exception as e:
        status_code, body = classify_ai_error(e, request.request_id)
        return JSONResponse(status_code=status_code, content=body.to_wire())

    if result.partial:
        return JSONResponse(
            status_code=status.HTTP_206_PARTIAL_CONTENT,
            content=result.document.to_wire(),
            headers={"X-Partial-Result": "true"},
        )
    return JSONResponse(status_code=status.HTTP_200_OK, content=result.document.to_wire())
