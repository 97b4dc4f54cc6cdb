"""LLM client implementations for Injaz."""

from injaz.clients.gemini import GeminiClient, GeminiResponse

__all__ = ["GeminiClient", "GeminiResponse"]
