import secrets

from fastapi import Depends, Header, HTTPException, status

from app.config import Settings, get_settings


async def require_api_key(
    x_api_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Shared-key guard for booking and payment routes; disabled when no key is set."""
    required = settings.internal_api_key
    if not required:
        return
    provided = (x_api_key or "").encode("utf-8")
    if not secrets.compare_digest(provided, required.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "invalid_api_key"},
        )
