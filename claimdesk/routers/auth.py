from typing import Callable, FrozenSet, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from ..services.auth import Actor, ActorRole, AuthService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_current_actor(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[Actor]:
    if not token:
        return None
    return AuthService.actor_from_token(token)


def require_auth(current_actor: Optional[Actor] = Depends(get_current_actor)) -> Actor:
    if not current_actor:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_actor


def require_roles(roles: FrozenSet[ActorRole]) -> Callable[[Actor], Actor]:
    def dependency(current_actor: Actor = Depends(require_auth)) -> Actor:
        if current_actor.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return current_actor

    return dependency
