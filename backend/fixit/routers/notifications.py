from fastapi import APIRouter, Depends, Query

from fixit.auth import require_session_user
from fixit.deps import get_notification_store
from fixit.models import NotificationRecord, User
from fixit.services.notification_store import NotificationStore

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRecord])
def list_notifications(
    unread_only: bool = Query(default=False),
    user: User = Depends(require_session_user),
    notifications: NotificationStore = Depends(get_notification_store),
):
    return notifications.list_for_user(user_id=user.id, unread_only=unread_only)
