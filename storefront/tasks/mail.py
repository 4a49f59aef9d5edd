# storefront/tasks/mail.py
import smtplib

from storefront.celery_worker import celery_app
from storefront.services.mailer import Mailer, otp_message, verification_message
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _deliver(msg) -> dict:
    try:
        Mailer().send(msg)
    except (smtplib.SMTPException, OSError) as e:
        # mail is best effort: the account operation already succeeded
        logger.error(f"Mail '{msg['Subject']}' to {msg['To']} failed: {e}")
        return {"to": msg["To"], "status": "failed"}
    logger.info(f"Mail '{msg['Subject']}' sent to {msg['To']}")
    return {"to": msg["To"], "status": "sent"}


@celery_app.task(name="storefront.tasks.mail.send_verification_email_task")
def send_verification_email_task(email: str, token: str):
    return _deliver(verification_message(email, token))


@celery_app.task(name="storefront.tasks.mail.send_otp_email_task")
def send_otp_email_task(email: str, otp: str):
    if not email:
        logger.error("OTP mail skipped: recipient email is missing")
        return {"to": email, "status": "failed"}
    return _deliver(otp_message(email, otp))
