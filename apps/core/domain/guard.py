# apps/core/domain/guard.py
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from apps.core.domain.errors import NotFoundError, UnauthorizedError


class Decision(str, Enum):
    ALLOW = 'allow'
    DENY = 'deny'


class ResourceKind(str, Enum):
    PROJECT = 'project'
    TASK = 'task'


# Resolver zwraca rekord, który niesie user_id właściciela
# (dla projektu sam projekt, dla zadania jego projekt) albo None, gdy go nie ma.
OwnerResolver = Callable[[Any], Awaitable[Optional[Any]]]


class AuthorizationGuard:
    """
    Jedno miejsce decyzji o dostępie do zasobów.

    Każdy rodzaj zasobu rejestruje własny resolver "zasób -> rekord z właścicielem".
    Zadanie nie ma własnego pola właściciela, więc jego resolver idzie
    przez projekt nadrzędny.
    """

    def __init__(self, resolvers: Optional[Dict[ResourceKind, OwnerResolver]] = None):
        self._resolvers: Dict[ResourceKind, OwnerResolver] = dict(resolvers or {})

    @staticmethod
    def authorize(caller_id: int, owner_id: int) -> Decision:
        if caller_id is None or str(caller_id) != str(owner_id):
            return Decision.DENY
        return Decision.ALLOW

    async def require(self, kind: ResourceKind, caller_id: int, resource: Any) -> Any:
        """Zwraca rekord-właściciela albo rzuca NotFound / Unauthorized."""
        resolver = self._resolvers.get(kind)
        if resolver is None:
            raise LookupError(f"No owner resolver registered for {kind.value}")

        anchor = await resolver(resource)
        # Brak rekordu zgłaszamy zanim w ogóle sprawdzimy uprawnienia
        if anchor is None:
            raise NotFoundError(f"{kind.value.capitalize()} not found")

        if self.authorize(caller_id, anchor.user_id) is Decision.DENY:
            raise UnauthorizedError("User not authorized")
        return anchor
