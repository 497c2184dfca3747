import asyncio
from typing import Optional, Type

import openai
import structlog
from openai import OpenAI

from qa_canvas.config.settings import settings
from qa_canvas.core.errors import ProviderError, ProviderNotConfiguredError
from qa_canvas.repositories.implementations.structured_output import parse_model_output, schema_instructions
from qa_canvas.repositories.interfaces.ai_service import IAIService, T

logger = structlog.get_logger()


class OpenAIService(IAIService):
    """OpenAI chat completions implementation of AI service"""

    provider = "openai"

    def __init__(self):
        self.client: Optional[OpenAI] = None
        if settings.openai_api_key:
            self.client = OpenAI(
                base_url=settings.openai_base_url,
                api_key=settings.openai_api_key
            )
        self.model = settings.openai_model

    @property
    def model_name(self) -> str:
        return self.model

    def is_configured(self) -> bool:
        return self.client is not None

    async def generate_object(
        self,
        schema: Type[T],
        prompt: str,
        *,
        system: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> T:
        """Generate a structured object using chat completions in JSON mode (async wrapper)"""
        client = self.client
        if client is None:
            raise ProviderNotConfiguredError(
                "OpenAI API key is not configured", provider=self.provider, model=self.model
            )

        system_prompt = "\n\n".join(part for part in (system, schema_instructions(schema)) if part)

        def sync_call():
            response = client.chat.completions.create(
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt}
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
                model=self.model
            )
            if not response.choices:
                return ""
            return response.choices[0].message.content or ""

        logger.info("OpenAI request", model=self.model, schema=schema.__name__, prompt_chars=len(prompt))
        try:
            content = await asyncio.get_event_loop().run_in_executor(None, sync_call)
        except openai.OpenAIError as e:
            logger.error("OpenAI request failed", model=self.model, error=str(e))
            raise ProviderError(f"OpenAI request failed: {e}", provider=self.provider, model=self.model) from e

        return parse_model_output(schema, content, self.provider, self.model)
