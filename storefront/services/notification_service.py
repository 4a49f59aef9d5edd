# storefront/services/notification_service.py
from storefront.tasks.mail import send_otp_email_task, send_verification_email_task
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Queues account mails on Celery.
    A broker outage is logged and never fails the calling request.
    """

    def send_verification_email(self, email: str, token: str) -> bool:
        try:
            send_verification_email_task.delay(email, token)
        except Exception as e:
            logger.error(f"Could not queue verification email for {email}: {e}")
            return False
        return True

    def send_otp_email(self, email: str, otp: str) -> bool:
        try:
            send_otp_email_task.delay(email, otp)
        except Exception as e:
            logger.error(f"Could not queue OTP email for {email}: {e}")
            return False
        return True
