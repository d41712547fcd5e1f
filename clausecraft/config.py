from __future__ import annotations
import os
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from clausecraft.errors import ConfigurationError

LLM_BACKENDS = ("huggingface", "openai")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(default="ClauseCraft AI")
    environment: str = Field(default="dev")
    session_secret: str = Field(default="dev-session-secret")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Inference backend
    llm_backend: str = Field(default="huggingface")
    llm_timeout_seconds: float = Field(default=60.0, gt=0)
    llm_temperature: float = Field(default=0.7)

    # Hugging Face
    hf_access_token: Optional[str] = Field(default=None)
    hf_model: str = Field(default="mistralai/Mistral-7B-Instruct-v0.2")
    hf_api_url: str = Field(default="https://api-inference.huggingface.co/models")

    # OpenAI-compatible
    openai_api_key: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_base_url: Optional[str] = Field(default=None)

    # Limits
    max_contract_tokens: int = 30_000

    def require_llm_credential(self) -> str:
        """
        Return the access credential for the configured backend.

        Called once while the app is built so a missing secret stops the
        process instead of failing every request.
        """
        backend = self.llm_backend.strip().lower()
        if backend not in LLM_BACKENDS:
            raise ConfigurationError(
                f"Unknown LLM_BACKEND '{self.llm_backend}'; expected one of {', '.join(LLM_BACKENDS)}."
            )
        token = self.hf_access_token if backend == "huggingface" else self.openai_api_key
        if not token:
            env_name = "HF_ACCESS_TOKEN" if backend == "huggingface" else "OPENAI_API_KEY"
            raise ConfigurationError(f"{env_name} must be set for the '{backend}' backend.")
        return token


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def app_version() -> str:
    return os.getenv("APP_VERSION", "0.1.0")
