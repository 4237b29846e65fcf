"""Bearer-key check and per-client rate limits for the reference API.

The adapters themselves never see these; they only guard the HTTP harness.
"""

import logging
import secrets

from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import ApiSettings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[ApiSettings.from_env().rate_limit],
)


async def require_api_key(
    credentials: HTTPAuthorizationCredentials = Security(bearer_scheme),
) -> None:
    """Reject requests whose bearer token is not the configured adapter key.

    Raises:
        HTTPException: 500 when ADAPTER_API_KEY is unset, 401 on a wrong token.
    """
    settings = ApiSettings.from_env()
    if settings.api_key is None:
        logger.error("ADAPTER_API_KEY is not set; refusing adapter API requests")
        raise HTTPException(status_code=500, detail="Server configuration error")
    if not secrets.compare_digest(credentials.credentials, settings.api_key):
        logger.warning("Rejected adapter API request with an unknown key")
        raise HTTPException(status_code=401, detail="Invalid API key")
