import hmac
from typing import Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import APIKeyHeader

from aquarium_health.core.config import Settings, get_settings

function_key_header = APIKeyHeader(name="x-functions-key", auto_error=False)


def require_function_key(
    header_key: Optional[str] = Depends(function_key_header),
    code: Optional[str] = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    # ✅ Auth OFF mode (no key configured)
    if not settings.FUNCTION_KEY:
        return

    supplied = header_key or code
    if not supplied:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing function key",
        )

    if not hmac.compare_digest(supplied.encode(), settings.FUNCTION_KEY.encode()):
        raise HTTPException(status_code=401, detail="Invalid function key")
