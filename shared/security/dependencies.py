from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer, APIKeyHeader
from .jwt_handler import verify_access_token
from .api_key import verify_api_key

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

# Defines the expected internal service header
api_key_header = APIKeyHeader(name="X-Internal-API-Key", auto_error=False)

async def get_token_payload(request: Request, token: str = Depends(oauth2_scheme)) -> dict:
    """Dependency to validate the JWT and return its claims."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    payload = verify_access_token(token)
    if payload is None or payload.get("sub") is None:
        raise credentials_exception

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise credentials_exception

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user_id
    request.state.is_admin = bool(payload.get("admin", False))
    return payload

async def get_current_user(payload: dict = Depends(get_token_payload)) -> int:
    """Dependency returning the authenticated user's id."""
    return int(payload["sub"])

async def get_current_admin(payload: dict = Depends(get_token_payload)) -> int:
    """Like get_current_user, but only lets operators through."""
    if not payload.get("admin", False):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return int(payload["sub"])

async def verify_internal_api_key(api_key: str = Depends(api_key_header)) -> bool:
    """Dependency to validate service-to-service internal requests."""
    if not verify_api_key(api_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or missing X-Internal-API-Key header"
        )
    return True

async def get_optional_user(request: Request, token: str = Depends(oauth2_scheme)) -> int | None:
    """User id when a valid bearer token is sent, None for anonymous callers.

    A token that is present but invalid is still rejected.
    """
    if not token:
        return None
    payload = await get_token_payload(request, token)
    return int(payload["sub"])
