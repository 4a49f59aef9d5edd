import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from storefront.data.database import Base
from storefront.data.models.user import utcnow


def new_session_key() -> str:
    return uuid.uuid4().hex


class SessionModel(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True)
    # single live session per user
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    # carried as "sid" in access tokens, new on every login
    key = Column(String(32), nullable=False, unique=True, default=new_session_key)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
