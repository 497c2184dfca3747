from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # API Configuration
    debug: bool = False
    environment: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"

    # Which generative provider backs document generation ("openai" or "gemini")
    ai_provider: str = "openai"

    # OpenAI Configuration (secrets come from environment)
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o"

    # Gemini Configuration (optional)
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-pro"

    # Generation parameters
    # Lower temperature keeps the canvas document structure consistent
    generation_temperature: float = 0.3
    generation_max_tokens: int = 4000
    suggestion_temperature: float = 0.4
    suggestion_max_tokens: int = 1000

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
