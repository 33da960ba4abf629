from typing import Any, Dict, List, Optional
from uuid import uuid4

from fixit.models import NotificationRecord, utcnow


class NotificationStore:
    """Append-only inbox. Delivery (push) is an external collaborator and not done here."""

    def __init__(self):
        self._notifications: List[NotificationRecord] = []

    def create(
        self,
        user_id: str,
        title: str,
        body: str,
        type: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> NotificationRecord:
        record = NotificationRecord(
            id=f"ntf_{uuid4().hex[:10]}",
            user_id=user_id,
            title=title,
            body=body,
            type=type,  # type: ignore[arg-type]
            data=data,
            is_read=False,
            created_at=utcnow(),
        )
        self._notifications.insert(0, record)
        return record

    def list_for_user(self, user_id: str, unread_only: bool = False) -> List[NotificationRecord]:
        rows = [n for n in self._notifications if n.user_id == user_id]
        if unread_only:
            rows = [n for n in rows if not n.is_read]
        return rows[:100]
