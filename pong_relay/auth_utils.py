import secrets
from typing import Optional

from fastapi import Header, HTTPException, Query, Request, status

# -----------------------------
# FastAPI dependency helpers
# -----------------------------


def token_matches(supplied: Optional[str], expected: str) -> bool:
    """Exact comparison of *supplied* against the configured token."""
    if supplied is None:
        return False
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


async def require_log_token(
    request: Request,
    token: Optional[str] = Query(default=None),
    x_log_token: Optional[str] = Header(default=None),
) -> Optional[str]:
    """Guard the log pages with the shared ``LOG_TOKEN`` secret.

    The token may come from the ``token`` query parameter or the
    ``x-log-token`` header. With no token configured the pages are open.
    Returns the accepted token so pages can carry it on their links.

    Raises
    ------
    HTTPException
        If a token is configured and the request does not carry it.
    """
    expected: str = request.app.state.settings.log_token
    if not expected:
        return None
    supplied = token or x_log_token
    if not token_matches(supplied, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return supplied


__all__ = ["token_matches", "require_log_token"]
