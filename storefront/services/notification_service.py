# storefront/services/notification_service.py
from kombu.exceptions import OperationalError

from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Customer notifications.
    Queued on Celery so checkout never waits on mail delivery.
    """

    @staticmethod
    def send_order_confirmation(user_id: int, order_id: int, order_number: str) -> bool:
        """
        Queue the order confirmation. The order is already committed at this
        point, so an unreachable broker is logged and reported, not raised.
        """
        try:
            send_order_confirmation_task.delay(user_id, order_id, order_number)
        except OperationalError as e:
            logger.warning(f"Could not queue confirmation for order {order_number}: {e}")
            return False
        return True


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(user_id: int, order_id: int, order_number: str):
    """
    Celery task - a real deployment would hand this to a mail transport.
    For now it only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: confirmation for order {order_number} (id {order_id})")

    return {"user_id": user_id, "order_id": order_id, "order_number": order_number, "status": "sent"}
