"""
AI Services
===========
Species care advice backed by an optional LLM provider.
"""

from app.services.ai.care_advisor import CareAdvisorService, CareSuggestion
from app.services.ai.llm_backends import AnthropicBackend, LLMBackend, LLMResponse, OpenAIBackend, create_backend

__all__ = [
    "AnthropicBackend",
    "CareAdvisorService",
    "CareSuggestion",
    "LLMBackend",
    "LLMResponse",
    "OpenAIBackend",
    "create_backend",
]
