from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from storefront.data.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)

    is_verified = Column(Boolean, nullable=False, default=False)
    token = Column(String, nullable=True)
    is_logged_in = Column(Boolean, nullable=False, default=False)

    otp = Column(String(6), nullable=True)
    otp_expiry = Column(DateTime(timezone=True), nullable=True)

    address = Column(String, nullable=True)
    city = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True)
    phone_number = Column(String(30), nullable=True)
    profile_pic = Column(String, nullable=True)
    profile_pic_public_id = Column(String, nullable=True)

    role = Column(String(10), nullable=False, default="user")  # user, admin

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
