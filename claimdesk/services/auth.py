from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from jose import JWTError, jwt

from ..config import get_settings

settings = get_settings()


class ActorRole(str, Enum):
    ADMIN = "admin"
    CLINIC = "clinic"
    STAFF = "staff"
    DOCTOR_STAFF = "doctorStaff"


INVOICING_ROLES = frozenset({ActorRole.CLINIC, ActorRole.STAFF, ActorRole.ADMIN})
CLAIM_ROLES = frozenset({ActorRole.DOCTOR_STAFF, ActorRole.STAFF, ActorRole.CLINIC, ActorRole.ADMIN})
ADMIN_ROLES = frozenset({ActorRole.ADMIN})


@dataclass(frozen=True)
class Actor:
    id: str
    role: ActorRole
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.id


class AuthService:
    @staticmethod
    def create_access_token(actor: Actor, expires_delta: Optional[timedelta] = None) -> str:
        if expires_delta:
            expire = datetime.utcnow() + expires_delta
        else:
            expire = datetime.utcnow() + timedelta(minutes=settings.jwt_access_token_expire_minutes)
        to_encode = {"sub": actor.id, "role": actor.role.value, "exp": expire}
        if actor.name:
            to_encode["name"] = actor.name
        return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    @staticmethod
    def decode_token(token: str) -> Optional[dict]:
        try:
            payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
            return payload
        except JWTError:
            return None

    @staticmethod
    def actor_from_token(token: str) -> Optional[Actor]:
        payload = AuthService.decode_token(token)
        if not payload:
            return None
        actor_id = payload.get("sub")
        if not actor_id:
            return None
        try:
            role = ActorRole(payload.get("role"))
        except ValueError:
            return None
        return Actor(id=str(actor_id), role=role, name=payload.get("name"))
