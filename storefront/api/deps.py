# storefront/api/deps.py
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.errors import AuthenticationError, AuthorizationError, NotFoundError
from storefront.repos.session_repo import SessionRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService
from storefront.services.media_client import MediaClient
from storefront.services.notification_service import NotificationService
from storefront.services.product_service import ProductService
from storefront.services.user_service import UserService
from storefront.utils import security


# process-wide clients
@lru_cache
def get_lock_service() -> LockService:
    return LockService()


@lru_cache
def get_media_client() -> MediaClient:
    return MediaClient()


@lru_cache
def get_notifier() -> NotificationService:
    return NotificationService()


def get_cart_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


def get_user_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    media: MediaClient = Depends(get_media_client),
) -> UserService:
    return UserService(db=db, notifier=notifier, media=media)


def get_product_service(
    db: Session = Depends(get_db),
    media: MediaClient = Depends(get_media_client),
    cart_service: CartService = Depends(get_cart_service),
) -> ProductService:
    return ProductService(db=db, media=media, cart_service=cart_service)


def get_current_user(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> UserModel:
    token = security.bearer_token(authorization)
    if not token:
        raise AuthenticationError("Access token is missing or invalid")

    claims = security.decode_claims(token, security.ACCESS)

    user = UserRepo(db).get_user(claims["id"])
    if not user:
        raise NotFoundError("User not found")

    # logout or a newer login replaces the session, which kills older access tokens
    session = SessionRepo(db).get_by_user(user.id)
    if not session:
        raise AuthenticationError("User is logged out, please login again")
    if claims.get("sid") != session.key:
        raise AuthenticationError("Session has ended, please login again")

    return user


def require_admin(user: UserModel = Depends(get_current_user)) -> UserModel:
    if user.role != "admin":
        raise AuthorizationError("Admin access only")
    return user
