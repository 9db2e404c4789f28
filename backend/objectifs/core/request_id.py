from __future__ import annotations

import uuid
from contextvars import ContextVar

"""
Core Request ID.

Identifiant de corrélation d’une requête HTTP, stocké dans un ContextVar :
repris du header X-Request-Id s’il est fourni, généré sinon. Lu par le logging
(JsonFormatter) et par les handlers d’erreurs (payload `request_id`).
"""

REQUEST_ID_HEADER = "X-Request-Id"

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(rid: str | None) -> None:
    _request_id.set(rid)


def get_request_id() -> str | None:
    return _request_id.get()


def ensure_request_id(incoming: str | None = None) -> str:
    """Réutilise le request_id entrant (nettoyé) ou en génère un, puis l’attache au contexte."""
    rid = (incoming or "").strip()[:64] or uuid.uuid4().hex
    set_request_id(rid)
    return rid
