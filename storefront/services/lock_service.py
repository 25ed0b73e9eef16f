import uuid
from contextlib import contextmanager

import redis
from storefront.domain.errors import ConflictOnWrite
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, PRODUCT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje lua jako jedna nieprzerywalna operacje
#nikt nie wcisnie sie miedzy GET a DEL, wiec nie usuniemy cudzego locka


def _lock_key(product_id: str) -> str:
    return f"product:{product_id}:reserve-lock"


class LockService:
    """
    -krotki lock na produkt na czas liczenia dostepnosci i zapisu rezerwacji
    -zwalnianie locka tylko przez wlasciciela (token)
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, ttl: int | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl or PRODUCT_LOCK_TTL_SECONDS

    @redis_retry()
    def acquire_product_lock(self, product_id: str, token: str, ttl: int) -> bool:
        key = _lock_key(product_id)
        logger.debug(f"Acquire lock {key} token {token}")
        #SET product:abc:reserve-lock "<token>" NX EX 5
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,  # tylko jesli klucz nie istnieje
                ex=ttl,  # wygasa sam, nawet jak proces padnie w trakcie
            )
        )

    @redis_retry()
    def release_product_lock(self, product_id: str, token: str) -> bool:
        key = _lock_key(product_id)
        logger.debug(f"Release lock {key} token {token}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)

    @contextmanager
    def product_lock(self, product_id: str):
        token = uuid.uuid4().hex
        if not self.acquire_product_lock(product_id, token, self.ttl):
            logger.warning(f"Produkt {product_id} jest zablokowany przez inna rezerwacje")
            raise ConflictOnWrite("Product is being reserved by another request, please retry")
        try:
            yield token
        finally:
            self.release_product_lock(product_id, token)
