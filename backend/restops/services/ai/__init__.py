"""Generative-AI advisor."""

from restops.services.ai.gemini_client import (
    AIResponseError,
    AIServiceError,
    GeminiClient,
    get_gemini_client,
)

__all__ = ["AIResponseError", "AIServiceError", "GeminiClient", "get_gemini_client"]
