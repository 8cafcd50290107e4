"""Bearer token authentication for operator endpoints.

The metrics token (METRICS_TOKEN) is compared with secrets.compare_digest()
so the check is timing-safe. Without a configured token the metrics route is
never registered, so this dependency always has a token to compare against.
"""

from __future__ import annotations

import secrets

from fastapi import HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

bearer_scheme = HTTPBearer(auto_error=False)


async def require_metrics_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> str:
    """Validate the request carries the metrics bearer token.

    Raises:
        HTTPException 401: If no credentials or the token does not match.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expected = request.app.state.settings.metrics_token or ""
    if not expected or not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid metrics token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials
