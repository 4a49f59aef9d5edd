# storefront/services/mailer.py
import smtplib
from email.message import EmailMessage

from storefront.utils.logging import get_logger
from storefront.utils.retry import smtp_retry
from storefront.utils.settings import CLIENT_URL, MAIL_HOST, MAIL_PASS, MAIL_PORT, MAIL_USE_TLS, MAIL_USER

logger = get_logger(__name__)

VERIFY_TEMPLATE = """Hi!

You recently created an account on Ekart.
Please click the link below to verify your email:

{link}

If you did not request this, please ignore this email.

Thanks,
Ekart Team"""


def verification_message(email: str, token: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = MAIL_USER
    msg["To"] = email
    msg["Subject"] = "Email Verification"
    msg.set_content(VERIFY_TEMPLATE.format(link=f"{CLIENT_URL.rstrip('/')}/verify/{token}"))
    return msg


def otp_message(email: str, otp: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = MAIL_USER
    msg["To"] = email
    msg["Subject"] = "Password Reset OTP"
    msg.set_content(f"Your OTP for password reset is: {otp}")
    msg.add_alternative(f"<p>Your OTP for password reset is: <b>{otp}</b></p>", subtype="html")
    return msg


class Mailer:
    def __init__(self, host: str = MAIL_HOST, port: int = MAIL_PORT, user: str = MAIL_USER,
                 password: str = MAIL_PASS, use_tls: bool = MAIL_USE_TLS, timeout: int = 10):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @smtp_retry()
    def send(self, msg: EmailMessage):
        logger.info(f"Sending '{msg['Subject']}' to {msg['To']} via {self.host}:{self.port}")
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(msg)
