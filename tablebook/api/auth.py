"""Bearer token authentication producing the calling Actor"""

from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from tablebook.config import settings
from tablebook.reservations.types import Actor, Role

# Tokens are issued by the account service; this app only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def create_access_token(actor: Actor) -> str:
    """Create JWT access token"""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(actor.id),
        "role": actor.role.value,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


async def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    """Get the authenticated caller from the bearer token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
        subject = payload.get("sub")
        token_type = payload.get("type")
        role = Role(payload.get("role"))

        if subject is None or token_type != "access":
            raise credentials_exception
        actor_id = int(subject)
    except (JWTError, ValueError):
        raise credentials_exception

    return Actor(id=actor_id, role=role)


def require_role(required_role: Role):
    """Dependency factory for role-based access control"""
    async def role_checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.has_permission(required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return actor
    return role_checker
