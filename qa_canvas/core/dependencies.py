from functools import lru_cache

from fastapi import Depends

from qa_canvas.config.settings import settings
from qa_canvas.repositories.interfaces.ai_service import IAIService
from qa_canvas.repositories.implementations.gemini_service import GeminiService
from qa_canvas.repositories.implementations.openai_service import OpenAIService
from qa_canvas.services.qa_canvas_service import QACanvasService

AI_SERVICES = {
    "openai": OpenAIService,
    "gemini": GeminiService,
}


class Container:
    """Dependency injection container"""

    def __init__(self):
        self._ai_service = None

    @lru_cache()
    def ai_service(self) -> IAIService:
        """Get AI service instance for the configured provider (singleton)"""
        if self._ai_service is None:
            provider = settings.ai_provider.lower()
            if provider not in AI_SERVICES:
                raise ValueError(f"Unsupported AI provider: {settings.ai_provider}")
            self._ai_service = AI_SERVICES[provider]()
        return self._ai_service

    def qa_canvas_service(self, ai_service: IAIService) -> QACanvasService:
        """Get QA canvas service instance"""
        return QACanvasService(ai_service=ai_service)


# Global container instance
container = Container()


# Dependency providers for FastAPI
def get_ai_service() -> IAIService:
    """FastAPI dependency for AI service"""
    return container.ai_service()


def get_qa_canvas_service(ai_service: IAIService = Depends(get_ai_service)) -> QACanvasService:
    """FastAPI dependency for QA canvas service"""
    return container.qa_canvas_service(ai_service)
