from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from interview_agenda.core.db import get_session
from interview_agenda.core.security import ADMIN_ROLE, Principal, decode_access_token
from interview_agenda.models.scheduling_config import SchedulingConfig
from interview_agenda.services.config_service import get_scheduling_config

security = HTTPBearer(auto_error=False)

__all__ = ["get_session", "get_current_principal", "require_admin", "get_workspace_config"]


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    principal = decode_access_token(credentials.credentials)
    if not principal:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != ADMIN_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return principal


async def get_workspace_config(
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SchedulingConfig:
    return await get_scheduling_config(session, principal.workspace_id)
