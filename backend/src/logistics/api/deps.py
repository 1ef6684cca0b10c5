"""FastAPI dependencies for database sessions, data sources and authentication."""
from typing import AsyncGenerator, Optional
import structlog

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
import jwt

from logistics.database import AsyncSessionLocal
from logistics.auth.jwt import jwt_auth
from logistics.services.metrics_source import MetricsDataSource, SqlMetricsDataSource

logger = structlog.get_logger(__name__)

# HTTP Bearer token security scheme; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency.

    Yields:
        AsyncSession: Database session for the request lifecycle
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_metrics_source() -> MetricsDataSource:
    """
    Metrics data source dependency.

    Returns:
        MetricsDataSource: SQL data source opening one session per query
    """
    return SqlMetricsDataSource(AsyncSessionLocal)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    Get current authenticated admin from JWT token.

    Args:
        credentials: HTTP Bearer token from request header

    Returns:
        dict: Decoded claims (sub, email, permissions)

    Raises:
        HTTPException: If token is invalid, expired, or missing
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials

    try:
        payload = jwt_auth.verify_access_token(token)

        logger.info(
            "user_authenticated",
            user_id=payload.get("sub"),
            permissions=payload.get("permissions", []),
        )

        return payload

    except jwt.ExpiredSignatureError:
        logger.warning("token_expired", token_preview=token[:20] + "...")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        logger.warning("invalid_token", error=str(e), token_preview=token[:20] + "...")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
