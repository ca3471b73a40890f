from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.api.v1.deps import get_counselor_service
from mindyamsanzi.core.auth import CurrentUser, get_current_user, get_optional_user
from mindyamsanzi.core.database import get_db
from mindyamsanzi.core.exceptions import GatewayError, GatewayTimeout, ValidationError
from mindyamsanzi.schemas.chat import ChatMessageResponse, ChatRequest, ChatResponse
from mindyamsanzi.services.chat_log_service import ConversationLog
from mindyamsanzi.services.counselor_service import CounselorService

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


@router.post("/ai-chat", response_model=ChatResponse)
async def ai_chat(
    request: Request,
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    counselor: CounselorService = Depends(get_counselor_service)
):
    """Send the conversation to the AI counselor and return its reply"""
    try:
        body = await request.json()
    except ValueError:
        body = {}

    if not isinstance(body, dict) or not isinstance(body.get("messages"), list):
        return _error(400, "Missing messages array in body")

    try:
        chat_request = ChatRequest.model_validate(body)
    except PydanticValidationError as e:
        return _error(400, "Invalid messages array in body", details=[err["msg"] for err in e.errors()])

    # the token subject wins over whatever the body claims
    student_id = current_user.id if current_user else chat_request.student_id

    try:
        reply = await counselor.chat(chat_request.messages, student_id, authenticated=current_user is not None)
    except ValidationError as e:
        return _error(400, str(e))
    except GatewayTimeout:
        return _error(504, "AI provider timeout")
    except GatewayError as e:
        return _error(502, str(e))
    except Exception as e:
        logger.exception("Error in ai-chat")
        return _error(
            500,
            "Sorry, I encountered an error. Please try again in a moment.",
            details=str(e) or type(e).__name__
        )

    return ChatResponse(message=reply.message, chat_id=reply.chat_id)


@router.get("/chat/history", response_model=List[ChatMessageResponse])
async def get_chat_history(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's conversation, oldest first"""
    return await ConversationLog.history(db, current_user.id)
