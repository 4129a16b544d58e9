from fastapi import HTTPException, Request

from droneverse.core.di.service_locator import ServiceLocator
from droneverse.core.security.session import read_session_token
from droneverse.domain.usecases.inspection_workspace import InspectionWorkspace


def current_user_id(request: Request) -> str:
    cfg = ServiceLocator.config()
    token = request.cookies.get(cfg.session_cookie_name)
    user_id = read_session_token(token, cfg.session_secret, cfg.session_max_age)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user_id


def current_workspace(request: Request) -> InspectionWorkspace:
    return ServiceLocator.workspaces().get(current_user_id(request))


def client_ip(request: Request) -> str:
    """Peer address, or the first x-forwarded-for hop when TRUST_PROXY_HEADERS is on."""
    if ServiceLocator.config().trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        if forwarded:
            return forwarded
    return request.client.host if request.client else "unknown"


def rate_limited(request: Request) -> None:
    if not ServiceLocator.rate_limiter().hit(client_ip(request)):
        raise HTTPException(status_code=429, detail="Too many requests")
