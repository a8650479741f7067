"""FastAPI dependencies for identity, sessions and services.

The caller's identity comes from a JWT access token. Its ``role_ids`` claim
is trusted as the caller's resolved role set.
"""

from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tenantgate.core.logging import get_logger
from tenantgate.domain.services import MenuResolutionService, MenuService, RoleService
from tenantgate.infrastructure.auth import InvalidTokenError, TokenExpiredError, jwt_service
from tenantgate.infrastructure.persistence.database import get_db_session

logger = get_logger(__name__)

PLATFORM_TENANT_ID = ""


@dataclass
class CurrentUser:
    """Verified identity of the caller, extracted from a valid access token."""

    user_id: str
    tenant_id: str
    role_ids: list[str] = field(default_factory=list)
    username: str = ""

    @property
    def is_platform(self) -> bool:
        """Whether the caller acts at platform scope rather than for one tenant."""
        return self.tenant_id == PLATFORM_TENANT_ID


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
) -> CurrentUser:
    """Extract and validate the current user from the Authorization header.

    Args:
        authorization: The Authorization header value (e.g., "Bearer <token>").

    Returns:
        CurrentUser: The authenticated caller.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if authorization is None:
        logger.info("Authentication failed: missing Authorization header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Authentication failed: invalid Authorization header format")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt_service.validate_access_token(parts[1])
        return CurrentUser(
            user_id=payload["user_id"],
            tenant_id=payload.get("tenant_id") or PLATFORM_TENANT_ID,
            role_ids=[str(role_id) for role_id in payload.get("role_ids", [])],
            username=payload.get("username", ""),
        )
    except TokenExpiredError:
        logger.info("Authentication failed: token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except InvalidTokenError as e:
        logger.info("Authentication failed: invalid token", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except KeyError as e:
        logger.warning("Authentication failed: missing claim in token", missing_claim=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing claim: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]


async def require_platform_user(current_user: AuthenticatedUser) -> CurrentUser:
    """Ensure the caller acts at platform scope.

    Raises:
        HTTPException: 403 if the caller belongs to a tenant.
    """
    if not current_user.is_platform:
        logger.info(
            "Platform access denied",
            user_id=current_user.user_id,
            tenant_id=current_user.tenant_id,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Platform access required",
        )
    return current_user


PlatformUser = Annotated[CurrentUser, Depends(require_platform_user)]


def ensure_tenant_access(current_user: CurrentUser, tenant_id: str) -> None:
    """Reject a tenant caller touching another tenant's data.

    Platform callers may act on any tenant.

    Raises:
        HTTPException: 403 on a cross-tenant request.
    """
    if current_user.is_platform or current_user.tenant_id == tenant_id:
        return
    logger.info(
        "Cross-tenant access denied",
        user_id=current_user.user_id,
        tenant_id=current_user.tenant_id,
        target_tenant_id=tenant_id,
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access to another tenant is not allowed",
    )


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_menu_service(session: DbSession) -> MenuService:
    """Get the menu service bound to the request session."""
    return MenuService(session)


def get_role_service(session: DbSession) -> RoleService:
    """Get the role service bound to the request session."""
    return RoleService(session)


def get_resolution_service(session: DbSession) -> MenuResolutionService:
    """Get the resolution service bound to the request session."""
    return MenuResolutionService(session)


MenuSvc = Annotated[MenuService, Depends(get_menu_service)]
RoleSvc = Annotated[RoleService, Depends(get_role_service)]
ResolutionSvc = Annotated[MenuResolutionService, Depends(get_resolution_service)]
