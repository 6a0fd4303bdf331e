import logging

from celery import shared_task

from collab_hub.notifications.models import Notification

logger = logging.getLogger(__name__)


@shared_task(name="notifications.purge_expired")
def purge_expired_notifications() -> int:
    """Delete notifications past the retention window, read or not."""

    deleted, _ = Notification.objects.expired().delete()
    logger.info("Purged %s expired notifications", deleted)
    return deleted


@shared_task(name="notifications.cleanup_read")
def cleanup_read_notifications() -> int:
    """Delete read notifications older than the retention window."""

    deleted, _ = Notification.objects.expired().filter(is_read=True).delete()
    logger.info("Cleaned up %s read notifications", deleted)
    return deleted
