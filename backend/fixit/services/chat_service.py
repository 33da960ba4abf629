import logging
from typing import Tuple
from uuid import uuid4

from fixit.errors import MarketplaceNotFoundError, MarketplacePermissionError, MarketplaceValidationError
from fixit.models import Job, Message, User, utcnow
from fixit.services import lifecycle
from fixit.services.notification_store import NotificationStore
from fixit.services.state_store import AddMessage, AppStore

logger = logging.getLogger(__name__)


def validate_message(message: Message, job: Job, sender: User) -> None:
    """A message must come from a party to its job, with a matching sender_type."""
    if message.job_id != job.id:
        raise MarketplaceNotFoundError("Job not found")
    if message.sender_id != sender.id or message.sender_type != sender.user_type:
        raise MarketplacePermissionError()
    if not lifecycle.is_party(job, sender):
        raise MarketplacePermissionError()


class ChatService:
    """Builds and records chat messages. Transport is out of scope; messages only land in the chat slice."""

    def __init__(self, store: AppStore, notifications: NotificationStore):
        self.store = store
        self.notifications = notifications

    def _session_user(self) -> User:
        user = self.store.get_state().auth.user
        if user is None:
            raise MarketplacePermissionError("Sign in to continue")
        return user

    def _find_job(self, job_id: str) -> Job:
        for job in self.store.get_state().jobs.jobs:
            if job.id == job_id:
                return job
        raise MarketplaceNotFoundError("Job not found")

    def send_message(self, job_id: str, content: str) -> Message:
        sender = self._session_user()
        job = self._find_job(job_id)
        if sender.user_type not in {"customer", "professional"}:
            raise MarketplacePermissionError()
        if not (content or "").strip():
            raise MarketplaceValidationError({"content": "Message cannot be empty"})

        message = Message(
            id=f"msg_{uuid4().hex[:10]}",
            job_id=job.id,
            sender_id=sender.id,
            sender_type=sender.user_type,  # type: ignore[arg-type]
            content=content.strip(),
            timestamp=utcnow(),
        )
        validate_message(message, job, sender)
        self.store.dispatch(AddMessage(message))

        recipient_id = job.professional_id if sender.id == job.customer_id else job.customer_id
        if recipient_id:
            self.notifications.create(
                user_id=recipient_id,
                title=f"New message from {sender.name}",
                body=message.content[:120],
                type="new_message",
                data={"job_id": job.id, "message_id": message.id},
            )
        logger.debug("Message %s added to job %s", message.id, job.id)
        return message

    def messages_for_job(self, job_id: str) -> Tuple[Message, ...]:
        viewer = self._session_user()
        job = self._find_job(job_id)
        if not lifecycle.is_party(job, viewer):
            raise MarketplacePermissionError()
        return tuple(m for m in self.store.get_state().chat.messages if m.job_id == job_id)
