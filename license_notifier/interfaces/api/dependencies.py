"""FastAPI dependency utilities."""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from license_notifier.config import Settings, get_settings

bearer_scheme = HTTPBearer(auto_error=False)


def require_service_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject callers that do not present the configured service token.

    When no ``SERVICE_TOKEN`` is configured the endpoints are open, which suits
    deployments where the scheduler reaches the service over a private network.
    """

    expected = settings.service_token
    if not expected:
        return

    if credentials is None or not secrets.compare_digest(
        credentials.credentials, expected
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid service token",
            headers={"WWW-Authenticate": "Bearer"},
        )
