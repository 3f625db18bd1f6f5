from backend.scheduling.errors import AuthorizationError, NotFoundError
from backend.scheduling.records import NotificationRecord
from backend.scheduling.store import SchedulingStore


def list_my_notifications(store: SchedulingStore, user_id: str) -> list[NotificationRecord]:
    return sorted(store.list_notifications(user_id), key=lambda n: n.created_at, reverse=True)


def mark_notification_read(
    store: SchedulingStore,
    user_id: str,
    notification_id: str,
    is_read: bool = True,
) -> NotificationRecord:
    notification = store.get_notification(notification_id)
    if notification is None:
        raise NotFoundError('Notification not found.')

    if notification.user_id != user_id:
        raise AuthorizationError('You are not authorized to update this notification.')

    if notification.is_read != is_read:
        store.mark_notification_read(notification_id, is_read)
        notification.is_read = is_read

    return notification
