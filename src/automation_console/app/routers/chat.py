"""Assistant chat route."""

from fastapi import APIRouter

from automation_console.app.errors import ProviderError
from automation_console.app.models.chat import ChatRequest
from automation_console.app.services.chat_service import chat_service
from automation_console.app.services.logging_service import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["chat"])

PROVIDER_FAILURE_MESSAGE = "The assistant is unavailable right now. Please try again in a moment."


@router.post("/chat")
async def chat(request: ChatRequest) -> dict:
    """Answer the latest message of the transcript.

    The whole transcript is sent on every turn; nothing is kept server-side.
    """
    try:
        reply = await chat_service.converse(request.messages, request.provider)
    except ProviderError as e:
        # Vendor details stay in the log
        logger.error(f"Chat failed at {e.provider or 'provider'}: {e.message}")
        raise ProviderError(PROVIDER_FAILURE_MESSAGE, provider=e.provider) from e
    return {"success": True, "reply": reply}
