"""Assistant chat and audio transcription endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from injaz.api.deps import get_db, get_llm_client
from injaz.api.schemas import ChatRequest
from injaz.assistant.orchestrator import AssistantReply, ConversationOrchestrator
from injaz.assistant.prompts import build_system_prompt
from injaz.clients.gemini import GeminiClient
from injaz.services import conversations
from injaz.tools.executor import ExecutionContext, ToolExecutor

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])

DEFAULT_AUDIO_MIME_TYPE = "audio/webm"


@router.post("/chat")
async def chat(
    request: ChatRequest,
    db: Session = Depends(get_db),
    llm: GeminiClient = Depends(get_llm_client),
) -> Any:
    """Answer the last message, running any tools the model asks for."""
    if not request.user_id or not request.org_id:
        return JSONResponse(status_code=400, content={"error": "Missing userId or orgId"})
    if not request.messages:
        return JSONResponse(status_code=400, content={"error": "No messages provided"})
    if not request.messages[-1].content.strip():
        return JSONResponse(status_code=400, content={"error": "Last message is empty"})

    # Unknown conversations are a 404 before any tool can write
    extra_prompt = await run_in_threadpool(_prepare_chat, db, request.conversation_id)

    messages = [message.model_dump() for message in request.messages]
    system_prompt = build_system_prompt(extra_prompt)
    executor = ToolExecutor(
        ExecutionContext(org_id=request.org_id, user_id=request.user_id, session=db)
    )
    orchestrator = ConversationOrchestrator(llm, executor)

    try:
        reply = await orchestrator.run(messages, system_prompt)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception("ai_chat_failed", user_id=request.user_id)
        return JSONResponse(
            status_code=500, content={"error": "AI request failed", "details": str(e)}
        )

    if request.conversation_id:
        await run_in_threadpool(
            _store_turn, db, request.conversation_id, messages[-1]["content"], reply
        )

    body: dict[str, Any] = {"content": reply.content}
    if reply.tool_results:
        body["toolResults"] = reply.tool_results
    return body


def _prepare_chat(db: Session, conversation_id: str | None) -> str | None:
    if conversation_id:
        conversations.get_conversation(db, conversation_id)
    return conversations.extra_system_prompt(db)


def _store_turn(db: Session, conversation_id: str, user_text: str, reply: AssistantReply) -> None:
    conversations.add_message(db, conversation_id, "user", user_text)
    conversations.add_message(
        db,
        conversation_id,
        "assistant",
        reply.content,
        function_result=reply.tool_results or None,
    )
    db.commit()


@router.post("/transcribe")
async def transcribe(
    audio: UploadFile | None = File(default=None),
    llm: GeminiClient = Depends(get_llm_client),
) -> Any:
    if audio is None:
        return JSONResponse(status_code=400, content={"error": "No audio file provided"})

    content_type = audio.content_type or ""
    mime_type = content_type if content_type.startswith("audio/") else DEFAULT_AUDIO_MIME_TYPE
    try:
        text = await llm.transcribe(await audio.read(), mime_type)
    except Exception as e:
        logger.exception("transcription_failed")
        return JSONResponse(
            status_code=500, content={"error": "Transcription failed", "details": str(e)}
        )
    return {"text": text}
