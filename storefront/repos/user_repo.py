# storefront/repos/user_repo.py
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email.lower())
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def save(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def clear_expired_otps(self, now: datetime) -> int:
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.otp_expiry.is_not(None), UserModel.otp_expiry < now)
            .values(otp=None, otp_expiry=None)
        )
        self.db.commit()
        return result.rowcount

    def rollback(self):
        self.db.rollback()
