import enum
import logging
import uuid
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from propertech_scheduling.core.security import decode_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


class ActorRole(str, enum.Enum):
    TENANT = "tenant"
    MANAGER = "manager"


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as vouched for by the identity service."""

    id: uuid.UUID
    role: ActorRole

    @property
    def is_manager(self) -> bool:
        return self.role == ActorRole.MANAGER


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Actor:
    """
    Resolve the current actor from the bearer token.
    Returns 401 if the token is invalid or carries no usable identity.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    try:
        actor_id = uuid.UUID(str(payload.get("sub")))
        role = ActorRole(payload.get("role"))
    except ValueError:
        logger.warning(f"Token with unusable identity: sub={payload.get('sub')!r} role={payload.get('role')!r}")
        raise credentials_exception

    return Actor(id=actor_id, role=role)


def require_role(*roles: ActorRole):
    async def role_checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return actor
    return role_checker
