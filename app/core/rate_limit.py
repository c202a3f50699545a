from slowapi import Limiter
from starlette.requests import Request


def get_authorization_header(request: Request) -> str:
    """
    Rate-limit key: the Authorization header, else the client address.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    if auth:
        return auth
    return request.client.host if request.client else "anonymous"


limiter = Limiter(key_func=get_authorization_header)
