"""Google Gemini client with function calling and audio transcription.

Uses the google-genai SDK's async interface.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import structlog
from google import genai
from google.genai import types

from injaz.config import get_settings

logger = structlog.get_logger(__name__)

TRANSCRIPTION_PROMPT = (
    "Transcribe this audio exactly. Return only the transcription text, nothing else. "
    "If the audio is in Arabic, translate it to English."
)

_SCHEMA_TYPES = {
    "string": "STRING",
    "integer": "INTEGER",
    "number": "NUMBER",
    "boolean": "BOOLEAN",
    "array": "ARRAY",
    "object": "OBJECT",
}

_STOP_REASONS = {
    "STOP": "end_turn",
    "MAX_TOKENS": "max_tokens",
    "SAFETY": "content_filter",
    "RECITATION": "content_filter",
}


@dataclass
class GeminiResponse:
    """Response from Gemini API."""

    content: str
    tool_calls: list[dict[str, Any]]
    stop_reason: str
    usage: dict[str, int]


def to_gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Translate a JSON-schema fragment into Gemini's OpenAPI subset.

    Unknown types fall back to STRING. Empty ``properties`` and ``required``
    are omitted because Gemini rejects them on OBJECT schemas.
    """
    converted: dict[str, Any] = {}
    if "type" in schema:
        converted["type"] = _SCHEMA_TYPES.get(schema["type"], "STRING")
    for key in ("description", "enum"):
        if key in schema:
            converted[key] = schema[key]
    if schema.get("properties"):
        converted["properties"] = {
            name: to_gemini_schema(prop) for name, prop in schema["properties"].items()
        }
    if schema.get("required"):
        converted["required"] = schema["required"]
    if "items" in schema:
        converted["items"] = to_gemini_schema(schema["items"])
    return converted


def _declaration(tool: dict[str, Any]) -> types.FunctionDeclaration:
    schema = to_gemini_schema(tool["input_schema"])
    return types.FunctionDeclaration(
        name=tool["name"],
        description=tool["description"],
        # Parameterless tools are declared without a schema
        parameters=types.Schema.model_validate(schema) if "properties" in schema else None,
    )


def _function_response(message: dict[str, Any]) -> types.Part:
    result = message["content"]
    return types.Part(
        function_response=types.FunctionResponse(
            name=message.get("tool_name", "function"),
            response=result if isinstance(result, dict) else {"result": result},
        )
    )


def _usage(response: Any) -> dict[str, int]:
    metadata = getattr(response, "usage_metadata", None)
    if not metadata:
        return {"input_tokens": 0, "output_tokens": 0}
    return {
        "input_tokens": getattr(metadata, "prompt_token_count", 0) or 0,
        "output_tokens": getattr(metadata, "candidates_token_count", 0) or 0,
    }


class GeminiClient:
    """Client for Google's Gemini API with tool use support.

    Conversation messages use three roles: ``user``, ``assistant`` (which
    may carry ``tool_calls``) and ``tool_result`` (which carries the
    ``tool_name`` and the handler's result as ``content``).
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ):
        settings = get_settings()
        self._api_key = api_key or settings.google_api_key.get_secret_value()
        self._model_name = model or settings.gemini_model
        self._max_tokens = max_tokens or settings.llm_max_tokens
        self._temperature = temperature if temperature is not None else settings.llm_temperature

        self._client = genai.Client(api_key=self._api_key)
        self._logger = logger.bind(client="gemini", model=self._model_name)

    @property
    def model_name(self) -> str:
        return self._model_name

    def _build_tools(self, tools: list[dict[str, Any]]) -> list[types.Tool]:
        return [types.Tool(function_declarations=[_declaration(tool) for tool in tools])]

    def _build_contents(self, messages: list[dict[str, Any]]) -> list[types.Content]:
        """Convert conversation history to Gemini contents.

        Consecutive tool results become one user turn holding every function
        response, which is how Gemini expects parallel calls to be answered.
        """
        contents: list[types.Content] = []
        results: list[types.Part] = []

        for message in messages:
            role = message["role"]
            if role == "tool_result":
                results.append(_function_response(message))
                continue
            if results:
                contents.append(types.Content(role="user", parts=results))
                results = []

            if role == "user":
                contents.append(
                    types.Content(role="user", parts=[types.Part(text=message["content"])])
                )
            elif role == "assistant":
                parts = [types.Part(text=message["content"])] if message.get("content") else []
                parts.extend(
                    types.Part(
                        function_call=types.FunctionCall(name=call["name"], args=call["arguments"])
                    )
                    for call in message.get("tool_calls", [])
                )
                if parts:
                    contents.append(types.Content(role="model", parts=parts))

        if results:
            contents.append(types.Content(role="user", parts=results))
        return contents

    def _parse_response(self, response: Any) -> GeminiResponse:
        texts: list[str] = []
        tool_calls: list[dict[str, Any]] = []
        stop_reason = "end_turn"

        if response.candidates:
            candidate = response.candidates[0]
            parts = (candidate.content.parts if candidate.content else None) or []
            for part in parts:
                call = getattr(part, "function_call", None)
                if call:
                    tool_calls.append(
                        {
                            "id": f"call_{call.name}_{len(tool_calls)}",
                            "name": call.name,
                            "arguments": dict(call.args) if call.args else {},
                        }
                    )
                elif getattr(part, "text", None):
                    texts.append(part.text)

            finish_reason = getattr(candidate.finish_reason, "name", candidate.finish_reason)
            stop_reason = "tool_use" if tool_calls else _STOP_REASONS.get(str(finish_reason), "end_turn")

        return GeminiResponse(
            content="".join(texts),
            tool_calls=tool_calls,
            stop_reason=stop_reason,
            usage=_usage(response),
        )

    async def generate(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> GeminiResponse:
        """Generate a response from Gemini.

        Args:
            system_prompt: The system instruction for the assistant.
            messages: Conversation history as list of message dicts.
            tools: Optional list of tool definitions for function calling.

        Returns:
            GeminiResponse with content, tool calls, and usage info.
        """
        self._logger.debug(
            "generating_response",
            message_count=len(messages),
            tool_count=len(tools) if tools else 0,
        )

        config = types.GenerateContentConfig(
            max_output_tokens=self._max_tokens,
            temperature=self._temperature,
            system_instruction=system_prompt,
        )
        if tools:
            config.tools = cast(list[types.Tool | Callable[..., Any]], self._build_tools(tools))

        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=cast(list[Any], self._build_contents(messages)),
                config=config,
            )
        except Exception as e:
            self._logger.error("api_error", error=str(e))
            raise

        parsed = self._parse_response(response)
        self._logger.info(
            "response_generated",
            stop_reason=parsed.stop_reason,
            tool_calls=len(parsed.tool_calls),
            **parsed.usage,
        )
        return parsed

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        """Transcribe an audio clip, translating Arabic speech to English."""
        self._logger.debug("transcribing_audio", mime_type=mime_type, size=len(audio))
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=[
                    types.Part.from_bytes(data=audio, mime_type=mime_type),
                    TRANSCRIPTION_PROMPT,
                ],
            )
        except Exception as e:
            self._logger.error("transcription_error", error=str(e))
            raise

        text = (response.text or "").strip()
        self._logger.info("audio_transcribed", chars=len(text))
        return text
