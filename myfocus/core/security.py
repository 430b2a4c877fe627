"""
Security utilities for Supabase authentication and authorization.
"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jwt import decode as jwt_decode, InvalidTokenError
import structlog

from myfocus.core.settings import settings

logger = structlog.get_logger(__name__)

# JWT token scheme; missing header is reported as 401 below, not 403
bearer_scheme = HTTPBearer(auto_error=False)


class SupabaseUser:
    """User object extracted from Supabase JWT token."""
    
    def __init__(self, user_id: str, email: Optional[str], payload: dict):
        self.id = user_id
        self.email = email
        self.payload = payload
    
    def __str__(self):
        return f"SupabaseUser(id={self.id}, email={self.email})"
    
    def __repr__(self):
        return self.__str__()


class SecurityUtils:
    """Security utility functions for Supabase."""
    
    @staticmethod
    def verify_supabase_token(token: str) -> Optional[dict]:
        """Verify and decode Supabase JWT token."""
        try:
            return jwt_decode(
                token,
                settings.supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated"
            )
        except InvalidTokenError as e:
            logger.warning("JWT validation failed", error=str(e))
            return None
    
    @staticmethod
    def extract_user_from_token(payload: dict) -> Optional[SupabaseUser]:
        """Extract user information from JWT payload."""
        user_id = payload.get("sub")
        if not user_id:
            return None
        return SupabaseUser(user_id=user_id, email=payload.get("email"), payload=payload)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> SupabaseUser:
    """Get current authenticated user from Supabase JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    if credentials is None:
        raise credentials_exception
    
    payload = SecurityUtils.verify_supabase_token(credentials.credentials)
    if payload is None:
        raise credentials_exception
    
    user = SecurityUtils.extract_user_from_token(payload)
    if user is None:
        raise credentials_exception
    
    return user


def get_current_active_user(
    current_user: SupabaseUser = Depends(get_current_user)
) -> SupabaseUser:
    """Get current active user (additional checks can be added here)."""
    return current_user
