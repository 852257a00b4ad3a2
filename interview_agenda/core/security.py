from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from interview_agenda.core.config import settings

ADMIN_ROLE = "ADMIN"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str | None
    workspace_id: str


def create_access_token(
    subject: str | int,
    role: str | None = None,
    workspace_id: str = "default",
) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "type": "access",
        "role": role,
        "workspace_id": workspace_id,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Principal | None:
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    sub = payload.get("sub")
    if not sub:
        return None
    return Principal(
        user_id=str(sub),
        role=payload.get("role"),
        workspace_id=str(payload.get("workspace_id") or "default"),
    )
