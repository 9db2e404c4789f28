from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException

"""
Core Errors.

Rôle (fonctionnel) :
- Standardise le format des erreurs renvoyées par l’API (payload homogène).
- Fournit une exception applicative (AppHTTPException) pour lever des erreurs métier de façon cohérente.
- Regroupe les raccourcis des cas récurrents (401, 403, 404, conflit, validation).

Convention de réponse (exemple) :
{
  "error": "forbidden: not your consultant",
  "code": "NOT_YOUR_CONSULTANT",
  "request_id": "..."
}

`error` porte le message lisible, `code` reste stable pour les clients et les tests.
"""


def error_payload(
    *,
    code: str,
    message: str,
    request_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """Construit un payload d’erreur homogène pour l’API."""
    payload: Dict[str, Any] = {
        "error": message,
        "code": code,
        "request_id": request_id,
    }
    if details is not None:
        payload["details"] = details
    return payload


class AppHTTPException(HTTPException):
    """
    Exception applicative standardisée.

    Usage :
    - Lever une erreur “métier” avec un code stable et un message explicite.
    - Laisser la couche API/middlewares produire une réponse cohérente.

    Exemple :
        raise AppHTTPException(404, "NOT_FOUND", "not found: objectif")
    """

    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        # On conserve le format attendu par la couche de gestion d’erreurs de l’app
        super().__init__(status_code=status_code, detail={"code": code, "message": message, "details": details})

    @property
    def code(self) -> str:
        return self.detail["code"]

    @property
    def message(self) -> str:
        return self.detail["message"]


def unauthenticated(message: str = "unauthenticated") -> AppHTTPException:
    return AppHTTPException(401, "UNAUTHENTICATED", message)


def invalid_credential(message: str = "invalid credential") -> AppHTTPException:
    return AppHTTPException(401, "INVALID_CREDENTIAL", message)


def forbidden(code: str = "FORBIDDEN", message: str = "forbidden: not authorized") -> AppHTTPException:
    return AppHTTPException(403, code, message)


def not_found(what: str) -> AppHTTPException:
    return AppHTTPException(404, "NOT_FOUND", f"not found: {what}")


def conflict(message: str) -> AppHTTPException:
    # Conflits (unicité, dépendances) : 400 côté client
    return AppHTTPException(400, "CONFLICT", message)


def bad_request(message: str, code: str = "VALIDATION_ERROR") -> AppHTTPException:
    return AppHTTPException(400, code, message)


def internal_error() -> AppHTTPException:
    return AppHTTPException(500, "INTERNAL_ERROR", "internal server error")
