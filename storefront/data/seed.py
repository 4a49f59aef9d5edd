# storefront/data/seed.py
from storefront.data.database import SessionLocal
from storefront.data.models.user import UserModel
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger
from storefront.utils.security import hash_password
from storefront.utils.settings import ADMIN_EMAIL, ADMIN_PASSWORD

logger = get_logger(__name__)


def seed_admin(db, email: str | None = ADMIN_EMAIL, password: str | None = ADMIN_PASSWORD) -> UserModel | None:
    """Create a verified admin account unless one with that e-mail exists."""
    if not email or not password:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seed")
        return None

    repo = UserRepo(db)
    # not forcing: an existing account is left untouched
    if repo.get_by_email(email):
        return None

    admin = repo.create_user(
        UserModel(
            first_name="Store",
            last_name="Admin",
            email=email.lower(),
            password=hash_password(password),
            is_verified=True,
            role="admin",
        )
    )
    logger.info(f"Seeded admin user {admin.id} ({admin.email})")
    return admin


def seed():
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
