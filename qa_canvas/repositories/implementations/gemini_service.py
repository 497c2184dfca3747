import asyncio
from typing import Optional, Type

import google.generativeai as genai
import structlog

from qa_canvas.config.settings import settings
from qa_canvas.core.errors import ProviderError, ProviderNotConfiguredError
from qa_canvas.repositories.implementations.structured_output import parse_model_output, schema_instructions
from qa_canvas.repositories.interfaces.ai_service import IAIService, T

logger = structlog.get_logger()


class GeminiService(IAIService):
    """Google Gemini implementation of AI service."""

    provider = "gemini"

    def __init__(self) -> None:
        self.configured = bool(settings.gemini_api_key)
        if self.configured:
            genai.configure(api_key=settings.gemini_api_key)
        self.model = settings.gemini_model

    @property
    def model_name(self) -> str:
        return self.model

    def is_configured(self) -> bool:
        return self.configured

    async def generate_object(
        self,
        schema: Type[T],
        prompt: str,
        *,
        system: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> T:
        if not self.configured:
            raise ProviderNotConfiguredError(
                "Gemini API key is not configured", provider=self.provider, model=self.model
            )

        system_instruction = "\n\n".join(part for part in (system, schema_instructions(schema)) if part)

        def sync_call():
            model = genai.GenerativeModel(self.model, system_instruction=system_instruction)
            response = model.generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    max_output_tokens=max_tokens,
                    temperature=temperature,
                    # Ask the model to return raw JSON, no prose
                    response_mime_type="application/json",
                ),
            )
            return getattr(response, "text", None) or ""

        logger.info("Gemini request", model=self.model, schema=schema.__name__, prompt_chars=len(prompt))
        try:
            text = await asyncio.get_event_loop().run_in_executor(None, sync_call)
        except Exception as e:
            # The SDK raises google.api_core errors for transport failures and
            # ValueError when a candidate is blocked
            logger.error("Gemini generate_content failed", model=self.model, error=str(e))
            raise ProviderError(f"Gemini request failed: {e}", provider=self.provider, model=self.model) from e

        return parse_model_output(schema, text, self.provider, self.model)
