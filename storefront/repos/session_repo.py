# storefront/repos/session_repo.py
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.session import SessionModel, new_session_key


class SessionRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int) -> SessionModel | None:
        return self.db.execute(
            select(SessionModel).where(SessionModel.user_id == user_id)
        ).scalar_one_or_none()

    def delete_for_user(self, user_id: int) -> int:
        result = self.db.execute(delete(SessionModel).where(SessionModel.user_id == user_id))
        return result.rowcount

    def replace_for_user(self, user_id: int) -> SessionModel:
        """Drop whatever session the user had and start a new one, in one transaction."""
        self.delete_for_user(user_id)
        session = SessionModel(user_id=user_id, key=new_session_key())
        self.db.add(session)
        self.db.flush()
        return session
