"""
LLM Gateway Module

Sends the rendered handover prompt to Gemini and returns the narrative.
The model only writes prose from the supplied records; it never decides
which patients are important.
"""
from .gemini_client import (
    GeminiClient,
    GeminiConfig,
    GeminiModel,
    GeminiResponse,
    extract_text,
)

__all__ = [
    "GeminiClient",
    "GeminiConfig",
    "GeminiModel",
    "GeminiResponse",
    "extract_text",
]
