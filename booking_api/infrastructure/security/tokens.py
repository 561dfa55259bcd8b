import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ...application.ports.security import TokenIssuer

logger = logging.getLogger(__name__)


class JwtTokenIssuer(TokenIssuer):
    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 60) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, subject: str, claims: Optional[Dict[str, Any]] = None) -> str:
        to_encode = dict(claims or {})
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expires_minutes)
        to_encode.update({"sub": subject, "exp": expire, "type": "access"})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.warning("Token has expired")
            return None
        except jwt.PyJWTError as e:
            logger.warning(f"JWT error: {e}")
            return None
