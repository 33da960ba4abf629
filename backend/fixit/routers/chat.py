from fastapi import APIRouter, Depends

from fixit.auth import require_session_user
from fixit.deps import get_chat_service, raise_http_error
from fixit.errors import MarketplaceError
from fixit.models import Message, MessageCreateRequest, User
from fixit.services.chat_service import ChatService

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/{job_id}", response_model=list[Message])
def list_messages(
    job_id: str,
    _: User = Depends(require_session_user),
    chat: ChatService = Depends(get_chat_service),
):
    try:
        return list(chat.messages_for_job(job_id))
    except MarketplaceError as exc:
        raise_http_error(exc)


@router.post("/{job_id}", response_model=Message)
def send_message(
    job_id: str,
    payload: MessageCreateRequest,
    _: User = Depends(require_session_user),
    chat: ChatService = Depends(get_chat_service),
):
    try:
        return chat.send_message(job_id, payload.content)
    except MarketplaceError as exc:
        raise_http_error(exc)
