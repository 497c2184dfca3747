from fastapi import APIRouter
from qa_canvas.api.routes import analyze_ticket, health, suggestions

api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router)
api_router.include_router(analyze_ticket.router)
api_router.include_router(suggestions.router)
