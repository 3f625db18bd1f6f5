from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend.auth.dependencies import get_current_user, get_store
from backend.scheduling.enums import NotificationType
from backend.scheduling.inbox import list_my_notifications, mark_notification_read
from backend.scheduling.records import UserRecord
from backend.scheduling.store import SchedulingStore

router = APIRouter(tags=['notifications'])


class NotificationResponse(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    related_id: str | None = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MarkNotificationRequest(BaseModel):
    is_read: bool = True


@router.get('', response_model=list[NotificationResponse])
def list_notifications(
    current_user: UserRecord = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    return [NotificationResponse.model_validate(n) for n in list_my_notifications(store, current_user.id)]


@router.patch('/{notification_id}', response_model=NotificationResponse)
def update_notification(
    notification_id: str,
    data: MarkNotificationRequest,
    current_user: UserRecord = Depends(get_current_user),
    store: SchedulingStore = Depends(get_store),
):
    notification = mark_notification_read(store, current_user.id, notification_id, data.is_read)
    return NotificationResponse.model_validate(notification)
