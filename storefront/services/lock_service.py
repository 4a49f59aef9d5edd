import uuid
from contextlib import contextmanager

import redis
from tenacity import RetryError, retry, retry_if_result, stop_after_delay, wait_fixed

from storefront.domain.errors import ConflictError
from storefront.utils.logging import get_logger
from storefront.utils.retry import redis_retry
from storefront.utils.settings import CART_LOCK_TTL_SECONDS, CART_LOCK_WAIT_SECONDS, REDIS_URL

logger = get_logger(__name__)

# compare-and-delete, atomic on the server
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

# Redis runs the script as one uninterruptible step,
# so nothing can slip in between GET and DEL


class LockService:
    """
    -per-user cart mutation lock
    -release only by the holder (Lua compare-and-delete)
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(user_id: int) -> str:
        return f"cart:{user_id}:lock"

    @redis_retry()
    def acquire_cart_lock(self, user_id: int, holder: str, ttl: int) -> bool:
        key = self._key(user_id)
        # SET cart:7:lock "<holder>" NX EX 5
        return bool(self.redis.set(name=key, value=holder, nx=True, ex=ttl))

    @redis_retry()
    def release_cart_lock(self, user_id: int, holder: str) -> bool:
        key = self._key(user_id)
        res = self.redis.eval(_RELEASE_LUA, 1, key, holder)
        return bool(res)

    @contextmanager
    def cart_lock(self, user_id: int, ttl: int = CART_LOCK_TTL_SECONDS, wait: float = CART_LOCK_WAIT_SECONDS):
        holder = uuid.uuid4().hex

        @retry(
            retry=retry_if_result(lambda ok: not ok),
            stop=stop_after_delay(wait),
            wait=wait_fixed(0.05),
        )
        def _acquire():
            return self.acquire_cart_lock(user_id, holder, ttl)

        try:
            _acquire()
        except RetryError:
            logger.warning(f"Cart lock for user {user_id} still busy after {wait}s")
            raise ConflictError("Cart is being updated, please try again")

        logger.debug(f"Cart lock acquired for user {user_id}")
        try:
            yield
        finally:
            if not self.release_cart_lock(user_id, holder):
                logger.warning(f"Cart lock for user {user_id} expired before release")
