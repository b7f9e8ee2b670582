from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from .jwt_handler import verify_access_token

def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Uses the user ID from the bearer token when there is one, so a shopper
    behind a shared NAT doesn't eat someone else's checkout budget.
    Falls back to the client's IP address if unauthenticated.
    """
    auth_header = request.headers.get("Authorization")

    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]
        payload = verify_access_token(token)
        if payload and "sub" in payload:
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"

limiter = Limiter(key_func=user_id_or_ip)


def setup_rate_limiting(app: FastAPI):
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
