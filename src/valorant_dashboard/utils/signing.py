"""HS256-signed cookie payloads (session references and the account registry)."""
import time
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from valorant_dashboard.config.logging import get_logger

logger = get_logger("session.signing")

ALGORITHM = "HS256"


class TokenSigner:
    def __init__(self, secret: str):
        self._secret = secret

    def sign(self, payload: Dict[str, Any], max_age_seconds: int) -> str:
        issued_at = int(time.time())
        claims = dict(payload)
        claims["iat"] = issued_at
        claims["exp"] = issued_at + max_age_seconds
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)

    def verify(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Return the claims of a valid, unexpired token, otherwise None."""
        if not token:
            return None
        try:
            return jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.warning("Rejected signed cookie", error=str(e))
            return None
