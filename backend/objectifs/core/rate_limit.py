from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Dict

from fastapi import Request

from objectifs.core.errors import AppHTTPException
from objectifs.core.settings import settings

"""
Core Rate Limit.

Rôle (fonctionnel) :
- Freine les tentatives de connexion en rafale (force brute sur /auth/login).
- Compteur “in-memory” par IP cliente, fenêtre fixe de 60 secondes
  (changer de username ne remet pas le compteur à zéro).
- Process-local : avec plusieurs workers chaque process a son propre compteur.

Activation via settings :
- RATE_LIMIT_ENABLED : active/désactive le rate limiting.
- RATE_LIMIT_RPM : nombre de tentatives autorisées par minute.
"""

_WINDOW_S = 60.0


@dataclass
class _Bucket:
    window_start: float
    count: int


class LoginRateLimiter:
    """Compteur de tentatives par fenêtre fixe ; lève 429 au-delà de la limite."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._buckets: Dict[str, _Bucket] = {}

    def _client_ip(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _prune(self, now: float) -> None:
        # Appelé sous le verrou
        expired = [ip for ip, b in self._buckets.items() if (now - b.window_start) >= _WINDOW_S]
        for ip in expired:
            del self._buckets[ip]

    def check(self, request: Request) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        limit = int(settings.RATE_LIMIT_RPM or 0)
        if limit <= 0:
            return

        key = self._client_ip(request)
        now = time.monotonic()

        with self._lock:
            self._prune(now)
            bucket = self._buckets.get(key)

            if bucket is None:
                self._buckets[key] = _Bucket(window_start=now, count=1)
                return

            bucket.count += 1
            if bucket.count > limit:
                raise AppHTTPException(
                    429,
                    "RATE_LIMITED",
                    f"too many login attempts (limit: {limit}/min)",
                    details={"limit_rpm": limit},
                )

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


login_rate_limiter = LoginRateLimiter()
