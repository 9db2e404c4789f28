from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from fastapi import Request
from jwt import InvalidTokenError
from passlib.context import CryptContext

from objectifs.core.errors import AppHTTPException, invalid_credential, unauthenticated
from objectifs.core.settings import DEFAULT_JWT_SECRET, settings

"""
Core Security (mots de passe + JWT).

Rôle (fonctionnel) :
- Hachage / vérification des mots de passe (passlib, pbkdf2_sha256).
- Émission d’un token d’accès signé (PyJWT) à la connexion.
- Vérification du header `Authorization: Bearer <token>` et décodage en Identity.

Comportement :
- Header absent ou pas au format Bearer : 401 UNAUTHENTICATED.
- Token illisible, expiré ou mal signé : 401 INVALID_CREDENTIAL.
- En prod, un JWT_SECRET vide ou laissé par défaut est une mauvaise config serveur (500).

Notes :
- L’identifiant utilisateur est normalisé en `id` quel que soit le claim présent
  (id, userid, userId, sub) : les tokens émis par d’anciennes versions restent lisibles.
"""

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

_ID_CLAIMS = ("id", "userid", "userId", "sub")


@dataclass(frozen=True)
class Identity:
    """Appelant authentifié (décodé du token puis rafraîchi depuis la base)."""
    id: int
    username: str
    role: str
    business_unit_id: Optional[int] = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # Hash inconnu / corrompu en base : traité comme un mauvais mot de passe
        return False


def _secret() -> str:
    secret = settings.JWT_SECRET or ""
    if str(settings.ENV).lower() == "prod" and (not secret or secret == DEFAULT_JWT_SECRET):
        raise AppHTTPException(500, "SERVER_MISCONFIG", "JWT_SECRET missing on server")
    return secret


def create_access_token(user_id: int, username: str, role: str, expires_min: Optional[int] = None) -> str:
    """Crée un token JWT d’accès avec expiration."""
    minutes = settings.JWT_EXPIRES_MIN if expires_min is None else expires_min
    payload: dict[str, Any] = {
        "id": user_id,
        "username": username,
        "role": role,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, _secret(), algorithm=settings.JWT_ALG)


def decode_token(token: str) -> Identity:
    """Décode et valide un token JWT ; lève 401 INVALID_CREDENTIAL sinon."""
    try:
        data = jwt.decode(token, _secret(), algorithms=[settings.JWT_ALG])
    except InvalidTokenError:
        raise invalid_credential()

    raw_id = next((data[k] for k in _ID_CLAIMS if data.get(k) is not None), None)
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError):
        raise invalid_credential()

    role = data.get("role")
    if not role:
        raise invalid_credential()

    return Identity(id=user_id, username=str(data.get("username") or ""), role=str(role))


def extract_bearer(request: Request) -> str:
    """Extrait le token du header Authorization ; lève 401 si absent ou mal formé."""
    auth = request.headers.get("authorization")
    if not auth:
        raise unauthenticated()
    parts = auth.split()
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise unauthenticated()
    return parts[1].strip()
