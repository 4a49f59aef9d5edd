import smtplib
from datetime import datetime, timedelta, timezone

from storefront.data.models.user import UserModel
from storefront.data.seed import seed_admin
from storefront.repos.user_repo import UserRepo
from storefront.services import notification_service
from storefront.services.mailer import otp_message, verification_message
from storefront.services.notification_service import NotificationService
from storefront.tasks import mail
from storefront.tasks.cleanup import clear_expired_otps
from storefront.utils.security import verify_password


class RecordingMailer:
    sent = []
    error = None

    def send(self, msg):
        if self.error:
            raise self.error
        RecordingMailer.sent.append(msg)


def _reset_mailer(monkeypatch, error=None):
    RecordingMailer.sent = []
    RecordingMailer.error = error
    monkeypatch.setattr(mail, "Mailer", RecordingMailer)


def test_verification_mail_links_to_client():
    msg = verification_message("jane@example.com", "tok123")

    assert msg["To"] == "jane@example.com"
    assert "http://localhost:5173/verify/tok123" in msg.get_content()


def test_otp_mail_has_html_alternative():
    msg = otp_message("jane@example.com", "123456")

    html = msg.get_body(preferencelist=("html",)).get_content()
    assert "<b>123456</b>" in html


def test_verification_task_sends(monkeypatch):
    _reset_mailer(monkeypatch)

    result = mail.send_verification_email_task("jane@example.com", "tok")

    assert result == {"to": "jane@example.com", "status": "sent"}
    assert RecordingMailer.sent[0]["Subject"] == "Email Verification"


def test_mail_task_reports_smtp_failure(monkeypatch):
    _reset_mailer(monkeypatch, error=smtplib.SMTPServerDisconnected("gone"))

    result = mail.send_otp_email_task("jane@example.com", "123456")

    assert result == {"to": "jane@example.com", "status": "failed"}


def test_otp_task_skips_missing_recipient(monkeypatch):
    _reset_mailer(monkeypatch)

    result = mail.send_otp_email_task("", "123456")

    assert result["status"] == "failed"
    assert RecordingMailer.sent == []


def test_notifier_swallows_broker_outage(monkeypatch):
    def broken_delay(*args, **kwargs):
        raise ConnectionError("broker down")

    monkeypatch.setattr(notification_service.send_verification_email_task, "delay", broken_delay)
    monkeypatch.setattr(notification_service.send_otp_email_task, "delay", broken_delay)

    notifier = NotificationService()
    assert notifier.send_verification_email("jane@example.com", "tok") is False
    assert notifier.send_otp_email("jane@example.com", "123456") is False


def test_notifier_queues_tasks(monkeypatch):
    queued = []
    monkeypatch.setattr(
        notification_service.send_otp_email_task, "delay", lambda *args: queued.append(args)
    )

    assert NotificationService().send_otp_email("jane@example.com", "123456") is True
    assert queued == [("jane@example.com", "123456")]


def test_clear_expired_otps_keeps_live_ones(db, make_user):
    now = datetime.now(timezone.utc)
    stale = make_user("stale@example.com", otp="111111", otp_expiry=now - timedelta(minutes=1))
    fresh = make_user("fresh@example.com", otp="222222", otp_expiry=now + timedelta(minutes=5))

    assert clear_expired_otps(db, now) == 1

    db.expire_all()
    assert db.get(UserModel, stale).otp is None
    assert db.get(UserModel, stale).otp_expiry is None
    assert db.get(UserModel, fresh).otp == "222222"


def test_seed_admin_creates_verified_admin(db):
    admin = seed_admin(db, email="Boss@Example.com", password="rootpass1")

    assert admin.email == "boss@example.com"
    assert admin.role == "admin"
    assert admin.is_verified is True
    assert verify_password("rootpass1", admin.password)


def test_seed_admin_leaves_existing_account(db, make_user):
    make_user("boss@example.com")

    assert seed_admin(db, email="boss@example.com", password="rootpass1") is None
    assert UserRepo(db).get_by_email("boss@example.com").role == "user"


def test_seed_admin_needs_credentials(db):
    assert seed_admin(db, email=None, password=None) is None


def test_root_and_health(client):
    assert client.get("/").text == "Ekart Backend API is Live"
    assert client.get("/health").json() == {"success": True, "status": "ok"}
