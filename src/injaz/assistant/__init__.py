"""The Injaz AI assistant."""

from injaz.assistant.orchestrator import AssistantReply, ConversationOrchestrator
from injaz.assistant.prompts import DEFAULT_SYSTEM_PROMPT, build_system_prompt

__all__ = [
    "AssistantReply",
    "ConversationOrchestrator",
    "DEFAULT_SYSTEM_PROMPT",
    "build_system_prompt",
]
