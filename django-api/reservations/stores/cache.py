"""ReservationCache backed by Django's cache framework.

Every call is retried with a fixed backoff; a call that still fails is
logged and treated as a miss, so the cache can never fail a request.

Namespaces are dropped with ``delete_pattern`` when the backend has it
(django-redis). Other backends keep a registry of the keys set under each
namespace and delete them with ``delete_many``.
"""

import logging
from typing import Any

from django.core.cache import BaseCache

from reservations.stores.interfaces import ReservationCache
from reservations.stores.retry import call_with_retries

logger = logging.getLogger(__name__)

REGISTRY_SUFFIX = "__keys__"


class DjangoReservationCache(ReservationCache):
    def __init__(
        self,
        backend: BaseCache,
        default_ttl: int = 1800,
        attempts: int = 3,
        delay: float = 0.2,
    ) -> None:
        self._backend = backend
        self._default_ttl = default_ttl
        self._attempts = attempts
        self._delay = delay
        self.supports_namespace_delete = hasattr(backend, "delete_pattern")

    def get(self, key: str) -> Any | None:
        return self._call(lambda: self._backend.get(key), f"cache get {key}")

    def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
        namespace: str | None = None,
    ) -> None:
        timeout = ttl or self._default_ttl
        self._call(lambda: self._backend.set(key, value, timeout), f"cache set {key}")
        if namespace and not self.supports_namespace_delete:
            self._register(namespace, key, timeout)

    def delete(self, key: str) -> None:
        self._call(lambda: self._backend.delete(key), f"cache delete {key}")

    def invalidate_namespace(self, namespace: str) -> None:
        if self.supports_namespace_delete:
            self._call(
                lambda: self._backend.delete_pattern(f"{namespace}:*"),
                f"cache delete_pattern {namespace}",
            )
            return

        registry = self._registry_key(namespace)
        keys = self._call(lambda: self._backend.get(registry), f"cache get {registry}")
        if keys:
            self._call(lambda: self._backend.delete_many(keys), f"cache delete_many {namespace}")
        self.delete(registry)

    def _register(self, namespace: str, key: str, timeout: int) -> None:
        registry = self._registry_key(namespace)

        def register() -> None:
            keys = self._backend.get(registry) or []
            if key not in keys:
                keys.append(key)
            # Refreshed on every set so it never expires before its newest entry.
            self._backend.set(registry, keys, max(timeout, self._default_ttl))

        self._call(register, f"cache register {key}")

    @staticmethod
    def _registry_key(namespace: str) -> str:
        return f"{namespace}:{REGISTRY_SUFFIX}"

    def _call(self, operation, description: str):
        try:
            return call_with_retries(
                operation,
                attempts=self._attempts,
                delay=self._delay,
                retry_on=(Exception,),
                description=description,
            )
        except Exception:
            logger.error("%s failed; continuing without cache", description, exc_info=True)
            return None
