"""Shared handling of JSON model output for the provider implementations."""

import json
import re
from typing import Optional, Type, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from qa_canvas.core.errors import SchemaValidationError

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)


def schema_instructions(schema: Type[BaseModel]) -> str:
    """System prompt suffix pinning the reply to ``schema``"""
    return (
        "IMPORTANT: Reply with a single, valid JSON object ONLY (no surrounding markdown, explanation text, or backticks). "
        "The JSON must follow this JSON Schema exactly, using the property names as written:\n"
        f"{json.dumps(schema.model_json_schema(by_alias=True))}"
    )


def extract_json(content: str) -> Optional[str]:
    """Extract a single JSON object from content.
    Handles code fences and finds the first balanced JSON object.
    """
    if not content:
        return None
    cleaned = content.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else cleaned
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
    cleaned = cleaned.replace("```json", "").replace("```JSON", "").strip()

    m = re.search(r"\{[\s\S]*\}", cleaned)
    if m:
        try:
            json.loads(m.group())
            return m.group()
        except json.JSONDecodeError:
            pass

    # Balanced braces scan
    depth = 0
    start = -1
    for i, ch in enumerate(cleaned):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start != -1:
                candidate = cleaned[start : i + 1]
                try:
                    json.loads(candidate)
                    return candidate
                except json.JSONDecodeError:
                    start = -1
    return None


def parse_model_output(schema: Type[T], content: str, provider: str, model: str) -> T:
    """Validate raw model text against ``schema`` or raise ``SchemaValidationError``"""
    extracted = extract_json(content)
    if extracted is None:
        logger.error("Model returned no JSON object", provider=provider, model=model, preview=(content or "")[:200])
        raise SchemaValidationError(
            f"Failed to generate {schema.__name__}: response contained no JSON object",
            provider=provider,
            model=model,
        )

    try:
        return schema.model_validate(json.loads(extracted))
    except ValidationError as e:
        logger.error(
            "Model output failed schema validation",
            provider=provider,
            model=model,
            schema=schema.__name__,
            error_count=e.error_count(),
        )
        raise SchemaValidationError(
            f"Failed to generate {schema.__name__}: output did not match the schema ({e.error_count()} errors)",
            provider=provider,
            model=model,
        ) from e
