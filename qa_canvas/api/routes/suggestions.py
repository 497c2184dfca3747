from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
import structlog

from qa_canvas.core.dependencies import get_qa_canvas_service
from qa_canvas.core.errors import classify_ai_error
from qa_canvas.models.suggestion import GenerateSuggestionsRequest
from qa_canvas.services.qa_canvas_service import QACanvasService

logger = structlog.get_logger()

router = APIRouter(tags=["suggestions"])


@router.post("/generate-suggestions")
async def generate_suggestions(
    request: GenerateSuggestionsRequest,
    service: QACanvasService = Depends(get_qa_canvas_service)
):
    """Generate suggestions that improve an existing QA canvas document"""
    logger.info(
        "Generating suggestions",
        ticket_id=request.current_document.metadata.ticket_id,
        max_suggestions=request.max_suggestions,
        request_id=request.request_id,
    )
    try:
        response = await service.generate_suggestions(request)
    except Exception as e:
        status_code, body = classify_ai_error(e, request.request_id)
        return JSONResponse(status_code=status_code, content=body.to_wire())

    return JSONResponse(status_code=status.HTTP_200_OK, content=response.to_wire())
