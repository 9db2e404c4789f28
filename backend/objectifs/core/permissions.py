from __future__ import annotations

from typing import Iterable, Optional, Protocol

from objectifs.core.errors import forbidden
from objectifs.core.security import Identity
from objectifs.models.user import Role

"""
Core Permissions (contrôle d’accès).

Rôle (fonctionnel) :
- Regroupe les règles d’accès communes à toutes les routes : rôle exigé, propriété
  d’une ressource, relation BUM -> consultant.
- Fonctions pures : elles ne lisent que l’Identity et la ressource passées en argument
  (aucun accès DB). Les services chargent la ressource puis composent ces règles.

Deux formes :
- `is_*` / `can_*` : renvoient un booléen (filtrage, visibilité).
- `require_*`      : lèvent une AppHTTPException 403 avec un code précis.

Hiérarchie :
- ADMIN : tout.
- BUM : uniquement les utilisateurs dont bum_id == son id, et leurs ressources.
- CONSULTANT : uniquement ses propres ressources.
"""

ELEVATED = (Role.ADMIN.value,)
MANAGERS = (Role.ADMIN.value, Role.BUM.value)


class Managed(Protocol):
    """Tout objet portant un id et un bum_id (User ORM, ligne de requête…)."""
    id: int
    bum_id: Optional[int]


def _role(value) -> str:
    return value.value if isinstance(value, Role) else str(value)


def is_admin(identity: Identity) -> bool:
    return identity.role == Role.ADMIN.value


def is_bum(identity: Identity) -> bool:
    return identity.role == Role.BUM.value


def require_role(identity: Identity, role) -> None:
    if identity.role != _role(role):
        raise forbidden("ROLE_REQUIRED", f"forbidden: role {_role(role)} required")


def require_any_role(identity: Identity, roles: Iterable) -> None:
    allowed = [_role(r) for r in roles]
    if identity.role not in allowed:
        raise forbidden("ROLE_REQUIRED", f"forbidden: one of roles {', '.join(allowed)} required")


def require_ownership_or_elevated(identity: Identity, owner_id: Optional[int], elevated_roles: Iterable = ELEVATED) -> None:
    if owner_id is not None and identity.id == owner_id:
        return
    if identity.role in [_role(r) for r in elevated_roles]:
        return
    raise forbidden("NOT_OWNER", "forbidden: not authorized")


def is_manager_of(identity: Identity, user: Managed) -> bool:
    """ADMIN gère tout le monde ; un BUM gère les utilisateurs qui lui sont assignés."""
    if is_admin(identity):
        return True
    return is_bum(identity) and user.bum_id is not None and user.bum_id == identity.id


def require_manager_of(identity: Identity, user: Managed) -> None:
    if is_manager_of(identity, user):
        return
    if is_bum(identity):
        raise forbidden("NOT_YOUR_CONSULTANT", "forbidden: not your consultant")
    raise forbidden("ROLE_REQUIRED", "forbidden: manager role required")


def can_view_user_resources(identity: Identity, owner: Managed) -> bool:
    """Le propriétaire, son BUM ou un ADMIN peuvent voir les ressources d’un utilisateur."""
    return identity.id == owner.id or is_manager_of(identity, owner)


def require_view_user_resources(identity: Identity, owner: Managed) -> None:
    if can_view_user_resources(identity, owner):
        return
    if is_bum(identity):
        raise forbidden("NOT_YOUR_CONSULTANT", "forbidden: not your consultant")
    raise forbidden("NOT_OWNER", "forbidden: not authorized")
