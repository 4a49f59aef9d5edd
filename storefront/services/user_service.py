import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from storefront.repos.session_repo import SessionRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.media_client import MediaClient
from storefront.services.notification_service import NotificationService
from storefront.utils import security
from storefront.utils.logging import get_logger
from storefront.utils.settings import OTP_TTL_MINUTES

logger = get_logger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "address", "city", "zip_code", "phone_number")


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def generate_otp() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


class UserService:
    """
    Account use cases: registration and e-mail verification, login/logout with
    a single live session per user, OTP password reset and profile updates.
    """

    def __init__(self, db: Session, notifier: NotificationService, media: MediaClient | None = None):
        self.repo = UserRepo(db)
        self.sessions = SessionRepo(db)
        self.notifier = notifier
        self.media = media

    def register(self, first_name: str | None, last_name: str | None, email: str | None,
                 password: str | None) -> UserModel:
        if not first_name or not last_name or not email or not password:
            raise ValidationError("All fields are required")

        email = email.lower()
        if self.repo.get_by_email(email):
            raise ConflictError("User already exists")

        try:
            user = self.repo.create_user(
                UserModel(
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                    password=security.hash_password(password),
                )
            )
        except IntegrityError:
            # lost a race with a concurrent registration of the same e-mail
            self.repo.rollback()
            raise ConflictError("User already exists")

        token = security.create_token(user.id, security.VERIFY)
        self.notifier.send_verification_email(email, token)

        user.token = token
        user = self.repo.save(user)

        logger.info(f"Registered user {user.id} ({email}), verification pending")
        return user

    def verify(self, authorization: str | None) -> UserModel:
        token = security.bearer_token(authorization)
        if not token:
            raise ValidationError("Token missing")

        # expired link -> 400, forged or foreign token -> 401
        user_id = security.decode_token(token, security.VERIFY, expired_status=400)

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        user.token = None
        user.is_verified = True
        user = self.repo.save(user)

        logger.info(f"User {user.id} verified")
        return user

    def login(self, email: str | None, password: str | None) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.repo.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        if not security.verify_password(password, user.password):
            raise AuthenticationError("Invalid password", status_code=400)

        if not user.is_verified:
            raise AuthenticationError("Email not verified", status_code=400)

        session = self.sessions.replace_for_user(user.id)
        access_token = security.create_token(user.id, security.ACCESS, session_key=session.key)
        refresh_token = security.create_token(user.id, security.REFRESH)

        user.is_logged_in = True
        user = self.repo.save(user)

        logger.info(f"User {user.id} logged in")
        return {"user": user, "access_token": access_token, "refresh_token": refresh_token}

    def logout(self, user: UserModel):
        self.sessions.delete_for_user(user.id)
        user.is_logged_in = False
        self.repo.save(user)
        logger.info(f"User {user.id} logged out")

    def forgot_password(self, email: str | None):
        if not email:
            raise ValidationError("Email is required")

        user = self.repo.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        otp = generate_otp()
        user.otp = otp
        user.otp_expiry = datetime.now(timezone.utc) + timedelta(minutes=OTP_TTL_MINUTES)
        self.repo.save(user)

        self.notifier.send_otp_email(user.email, otp)
        logger.info(f"Password reset OTP issued for user {user.id}")

    def verify_otp(self, email: str, otp: str | None):
        if not otp:
            raise ValidationError("OTP is required")

        user = self.repo.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        now = datetime.now(timezone.utc)
        if (
            not user.otp
            or not user.otp_expiry
            or not secrets.compare_digest(user.otp.encode(), otp.encode())
            or _as_utc(user.otp_expiry) < now
        ):
            raise ValidationError("Invalid or expired OTP")

        user.otp = None
        user.otp_expiry = None
        self.repo.save(user)
        logger.info(f"OTP verified for user {user.id}")

    def change_password(self, email: str, new_password: str | None, confirm_password: str | None):
        if not new_password or not confirm_password:
            raise ValidationError("All fields are required")

        if new_password != confirm_password:
            raise ValidationError("Passwords do not match")

        user = self.repo.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        user.password = security.hash_password(new_password)
        self.repo.save(user)
        logger.info(f"Password changed for user {user.id}")

    def get_user(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_user(self, actor: UserModel, user_id: int, fields: Dict[str, Any],
                    upload: Dict[str, Any] | None = None) -> UserModel:
        """Patch a profile.

        Only the owner or an admin may do it, and only an admin may change a
        role. Empty values leave the stored field alone. ``upload`` carries
        ``content``, ``filename`` and ``content_type`` of a new avatar.
        """
        if actor.id != user_id and actor.role != "admin":
            raise AuthorizationError("Not authorized")

        role = fields.get("role")
        if role and actor.role != "admin":
            raise AuthorizationError("Only admins can change roles")
        if role and role not in ("user", "admin"):
            raise ValidationError("role must be 'user' or 'admin'")

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        if upload:
            self._replace_profile_pic(user, upload)

        for name in PROFILE_FIELDS:
            value = fields.get(name)
            if value:
                setattr(user, name, value)
        if role:
            user.role = role

        user = self.repo.save(user)
        logger.info(f"User {user.id} updated by {actor.id}")
        return user

    def _replace_profile_pic(self, user: UserModel, upload: Dict[str, Any]):
        if user.profile_pic_public_id:
            try:
                self.media.destroy(user.profile_pic_public_id)
            except Exception as e:
                logger.warning(f"Could not delete old avatar {user.profile_pic_public_id}: {e}")

        try:
            uploaded = self.media.upload(
                upload["content"],
                upload["filename"],
                upload["content_type"],
                folder="profiles",
            )
        except Exception as e:
            logger.error(f"Avatar upload for user {user.id} failed: {e}")
            raise InternalError("Failed to upload profile picture")

        user.profile_pic = uploaded["url"]
        user.profile_pic_public_id = uploaded["public_id"]
