"""
Bearer token authentication.

Tokens are issued by the account service; this module only verifies them and
resolves the caller's user id.
"""

import logging
from datetime import timedelta
from typing import Optional

import jwt
from aiohttp import web

from ..utils import utc_now

logger = logging.getLogger(__name__)

USER_ID_KEY = "user_id"


class TokenVerifier:
    """Verifies HS256 session tokens and extracts the user id."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def verify(self, token: str) -> Optional[str]:
        """
        Decode a token.

        Returns:
            The user id from the ``userId`` claim (or ``sub``), None if the
            token is invalid or expired.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            return None
        except jwt.PyJWTError as e:
            logger.info(f"Rejected invalid token: {e}")
            return None

        user_id = payload.get("userId") or payload.get("sub")
        return str(user_id) if user_id else None

    def issue(self, user_id: str, expires_in: timedelta = timedelta(hours=1)) -> str:
        """Mint a token for local development and tests."""
        payload = {"userId": user_id, "exp": utc_now() + expires_in}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)


def _unauthorized(message: str) -> web.Response:
    return web.json_response({"success": False, "message": message}, status=401)


@web.middleware
async def auth_middleware(request: web.Request, handler):
    """Require a valid bearer token on /api/appointments routes."""
    if request.method == "OPTIONS" or not request.path.startswith("/api/appointments"):
        return await handler(request)

    header = request.headers.get("Authorization", "")
    token = header[len("Bearer "):].strip() if header.startswith("Bearer ") else ""
    if not token:
        return _unauthorized("No token, authorization denied")

    verifier: TokenVerifier = request.app["token_verifier"]
    user_id = verifier.verify(token)
    if not user_id:
        return _unauthorized("Token is not valid")

    request[USER_ID_KEY] = user_id
    return await handler(request)
