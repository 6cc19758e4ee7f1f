from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from subgraph_sql.core.config import settings

# auto_error=False so a missing header falls back to GATEWAY_API_KEY
bearer_scheme = HTTPBearer(auto_error=False)


# Take the gateway API key from "Authorization: Bearer <key>"
async def get_api_key(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
) -> str:
    if credentials is not None and credentials.credentials:
        return credentials.credentials

    if settings.GATEWAY_API_KEY:
        return settings.GATEWAY_API_KEY

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Gateway API key required",
        headers={"WWW-Authenticate": "Bearer"},
    )
